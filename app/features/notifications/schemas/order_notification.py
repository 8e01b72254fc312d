from pydantic import BaseModel, ConfigDict, EmailStr, Field


class OrderItem(BaseModel):
    name: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class OrderDetails(BaseModel):
    items: list[OrderItem] = Field(min_length=1)
    total: float = Field(ge=0)
    phone: str
    address: str


class OrderNotificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId", min_length=1)
    customer_email: EmailStr = Field(alias="customerEmail")
    order_details: OrderDetails = Field(alias="orderDetails")


class OrderNotificationResponse(BaseModel):
    success: bool = True
    message: str
