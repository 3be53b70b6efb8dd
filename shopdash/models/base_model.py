from pydantic import AliasGenerator, BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from typing import ClassVar, Optional

from shopdash.validation import (
    Amount,
    Count,
    Domain,
    Email,
    ExternalId,
    Price,
    RecordId,
    Status,
    Text,
    invalid_input,
    require_body,
    require_fields,
)


class Record(BaseModel):
    """
    Response shape of a stored row. Read from ORM attributes, dumped with
    camelCase keys.
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    @classmethod
    def dump(cls, row) -> dict:
        return cls.model_validate(row).model_dump(by_alias=True)


class Tenant(Record):
    id: int
    name: str
    shopify_domain: str
    shopify_access_token: str
    created_at: str
    updated_at: str


class Customer(Record):
    id: int
    tenant_id: int
    shopify_customer_id: str
    email: str
    first_name: str
    last_name: str
    total_spent: float
    orders_count: int
    created_at: str
    updated_at: str


class Product(Record):
    id: int
    tenant_id: int
    shopify_product_id: str
    title: str
    price: float
    inventory: int
    created_at: str
    updated_at: str


class Order(Record):
    id: int
    tenant_id: int
    shopify_order_id: str
    customer_id: int
    total_price: float
    status: str
    order_date: str
    created_at: str
    updated_at: str


class Payload(BaseModel):
    """
    Request body validated against camelCase keys.

    `from_body` checks presence of the `required` keys first, in order, then
    lets pydantic check formats and ranges. The first failure is raised with
    the code `codes` registers for its key. Unknown keys are ignored.
    """
    model_config = ConfigDict(alias_generator=to_camel)

    required: ClassVar[tuple] = ()
    codes: ClassVar[dict] = {}

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value):
        # Optional fields may be omitted, never sent as null
        if value is None:
            raise PydanticCustomError("null_value", "Input should not be null")
        return value

    @classmethod
    def prepare(cls, body: dict) -> dict:
        return body

    @classmethod
    def from_body(cls, body):
        body = require_body(body)
        require_fields(body, *cls.required)
        try:
            return cls.model_validate(cls.prepare(body))
        except ValidationError as exc:
            raise invalid_input(exc, cls.codes)


class CreatePayload(Payload):
    @classmethod
    def prepare(cls, body: dict) -> dict:
        # On create a null optional field takes its default
        return {key: value for key, value in body.items() if value is not None}


TENANT_CODES = {
    "name": "INVALID_NAME",
    "shopifyDomain": "INVALID_SHOPIFY_DOMAIN",
    "shopifyAccessToken": "INVALID_SHOPIFY_ACCESS_TOKEN",
}

CUSTOMER_CODES = {
    "tenantId": "INVALID_TENANT_ID",
    "shopifyCustomerId": "MISSING_SHOPIFY_CUSTOMER_ID",
    "email": "INVALID_EMAIL_FORMAT",
    "firstName": "INVALID_FIRST_NAME",
    "lastName": "INVALID_LAST_NAME",
    "totalSpent": "INVALID_TOTAL_SPENT",
    "ordersCount": "INVALID_ORDERS_COUNT",
}

PRODUCT_CODES = {
    "tenantId": "INVALID_TENANT_ID",
    "shopifyProductId": "MISSING_SHOPIFY_PRODUCT_ID",
    "title": "INVALID_TITLE",
    "price": "INVALID_PRICE",
    "inventory": "INVALID_INVENTORY",
}

ORDER_CODES = {
    "tenantId": "INVALID_TENANT_ID",
    "shopifyOrderId": "MISSING_SHOPIFY_ORDER_ID",
    "customerId": "INVALID_CUSTOMER_ID",
    "totalPrice": "INVALID_TOTAL_PRICE",
    "status": "INVALID_STATUS",
    "orderDate": "MISSING_ORDER_DATE",
}


class TenantCreate(CreatePayload):
    """
    Fields required to create a new tenant. The Shopify domain is stored
    lowercased.
    """
    required: ClassVar[tuple] = (
        ("name", "MISSING_NAME"),
        ("shopifyDomain", "MISSING_SHOPIFY_DOMAIN"),
        ("shopifyAccessToken", "MISSING_SHOPIFY_ACCESS_TOKEN"),
    )
    codes: ClassVar[dict] = TENANT_CODES

    name: Text
    shopify_domain: Domain
    shopify_access_token: Text


class TenantUpdate(Payload):
    """
    Fields for updating an existing tenant.
    Only the fields present in the body are set.
    """
    codes: ClassVar[dict] = TENANT_CODES

    name: Optional[Text] = None
    shopify_domain: Optional[Domain] = None
    shopify_access_token: Optional[Text] = None


class CustomerCreate(CreatePayload):
    required: ClassVar[tuple] = (
        ("tenantId", "MISSING_TENANT_ID"),
        ("shopifyCustomerId", "MISSING_SHOPIFY_CUSTOMER_ID"),
        ("email", "MISSING_EMAIL"),
        ("firstName", "MISSING_FIRST_NAME"),
        ("lastName", "MISSING_LAST_NAME"),
    )
    codes: ClassVar[dict] = CUSTOMER_CODES

    tenant_id: RecordId
    shopify_customer_id: ExternalId
    email: Email
    first_name: Text
    last_name: Text
    total_spent: Amount = 0.0
    orders_count: Count = 0


class CustomerUpdate(Payload):
    """
    All fields are optional for partial updates. The owning tenant and the
    Shopify id are fixed at creation.
    """
    codes: ClassVar[dict] = CUSTOMER_CODES

    email: Optional[Email] = None
    first_name: Optional[Text] = None
    last_name: Optional[Text] = None
    total_spent: Optional[Amount] = None
    orders_count: Optional[Count] = None


class ProductCreate(CreatePayload):
    required: ClassVar[tuple] = (
        ("tenantId", "MISSING_TENANT_ID"),
        ("shopifyProductId", "MISSING_SHOPIFY_PRODUCT_ID"),
        ("title", "MISSING_TITLE"),
        ("price", "MISSING_PRICE"),
    )
    codes: ClassVar[dict] = PRODUCT_CODES

    tenant_id: RecordId
    shopify_product_id: ExternalId
    title: Text
    price: Price
    inventory: Count = 0


class ProductUpdate(Payload):
    codes: ClassVar[dict] = PRODUCT_CODES

    title: Optional[Text] = None
    price: Optional[Price] = None
    inventory: Optional[Count] = None


class OrderCreate(CreatePayload):
    required: ClassVar[tuple] = (
        ("tenantId", "MISSING_TENANT_ID"),
        ("shopifyOrderId", "MISSING_SHOPIFY_ORDER_ID"),
        ("customerId", "MISSING_CUSTOMER_ID"),
        ("totalPrice", "MISSING_TOTAL_PRICE"),
        ("status", "MISSING_STATUS"),
        ("orderDate", "MISSING_ORDER_DATE"),
    )
    codes: ClassVar[dict] = ORDER_CODES

    tenant_id: RecordId
    shopify_order_id: ExternalId
    customer_id: RecordId
    total_price: Price
    status: Status
    # Caller-supplied; the format is not checked
    order_date: Text


class OrderUpdate(Payload):
    codes: ClassVar[dict] = ORDER_CODES

    status: Optional[Status] = None
    total_price: Optional[Price] = None
