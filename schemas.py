"""
Record Schemas for the Storefront

Each Pydantic model describes one flat record kept by the record store. The
stored form of a record is its `model_dump()`; loading goes back through the
model so every record read by the core is validated.

Users are a tagged union on `role`: a customer record carries the loyalty and
khata fields, a shopkeeper record carries the store status, and nothing else.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, field_validator

CATEGORIES = ["Fruits", "Vegetables", "Snacks", "Milk & Dairy", "Drinks"]
UNCATEGORIZED = "Uncategorized"
ALL_CATEGORIES = "All"

ROLES = ("customer", "shopkeeper")
STORE_STATUSES = ("open", "busy", "closed")
SETTLEMENT_TYPES = ("prepaid", "khata")

StoreStatus = Literal["open", "busy", "closed"]
SettlementType = Literal["prepaid", "khata"]


class CustomerAccount(BaseModel):
    """
    Customer users
    Reward points and prepaid count only ever change through settlement.
    """
    id: str
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email, matched case-insensitively")
    password: str = Field(..., description="Plain password, compared as-is")
    role: Literal["customer"] = "customer"
    reward_points: Union[int, float] = Field(
        0, description="1 point = 1 currency unit; fractional only after redeeming against paise",
    )
    prepaid_count: int = Field(0, ge=0, description="Prepaid orders placed so far")
    credit_limit: Optional[float] = Field(None, description="Display-only khata limit")
    used_credit: Optional[float] = Field(0.0, ge=0, description="Running khata balance")

    @field_validator("reward_points")
    @classmethod
    def whole_points_as_int(cls, value):
        if value < 0:
            raise ValueError("reward_points must not be negative")
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class ShopkeeperAccount(BaseModel):
    """Shopkeeper users"""
    id: str
    name: str = Field(..., description="Display name, copied onto products")
    email: str = Field(..., description="Login email, matched case-insensitively")
    password: str = Field(..., description="Plain password, compared as-is")
    role: Literal["shopkeeper"] = "shopkeeper"
    store_status: StoreStatus = Field("open", description="open | busy | closed")


User = Annotated[Union[CustomerAccount, ShopkeeperAccount], Field(discriminator="role")]
user_adapter = TypeAdapter(User)


class Product(BaseModel):
    id: str
    name: str
    price: float = Field(..., ge=0)
    image_url: str = Field("", description="Blank falls back to the default image")
    category: str = Field(UNCATEGORIZED)
    added_by_id: str = Field(..., description="Owning shopkeeper id")
    added_by_name: str = Field(..., description="Owning shopkeeper name at creation")


class CartLine(BaseModel):
    """
    Line in a user's cart; name and price are snapshotted when first added.
    """
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    price: float
    quantity: int = Field(1, ge=1)


class Order(BaseModel):
    """
    Placed orders
    Append-only; `to_pay` is always `subtotal - discount`.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    items: List[CartLine]
    subtotal: float
    discount: float = Field(0.0, ge=0)
    to_pay: float = Field(..., ge=0)
    type: SettlementType
    payment_method: str = Field(..., description="Chosen method for prepaid, 'khata' otherwise")
    date: str = Field(..., description="Display timestamp")


class ProductListing(BaseModel):
    product: Product
    image_url: str
    store_status: StoreStatus


class CartSummary(BaseModel):
    items: List[CartLine] = []
    subtotal: float = 0.0
    item_count: int = 0
    discount: float = 0.0
    total: float = 0.0
    khata_available: bool = False
    khata_note: str = ""


class CommandResult(BaseModel):
    ok: bool
    message: str = ""
    code: Optional[str] = None
    data: Any = None


# HTTP request bodies

class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: str = "customer"


class LoginRequest(BaseModel):
    email: str
    password: str
    role: str = "customer"


class AddProductRequest(BaseModel):
    name: str
    price: float
    image_url: Optional[str] = None
    category: Optional[str] = None


class CartAddRequest(BaseModel):
    product_id: str


class CartAdjustRequest(BaseModel):
    product_id: str
    delta: int


class CheckoutRequest(BaseModel):
    type: str
    use_rewards: bool = False
    payment_method: str = "upi"


class StoreStatusRequest(BaseModel):
    status: str
