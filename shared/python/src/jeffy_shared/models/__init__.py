"""
jeffy_shared.models — Pydantic models for API payloads and table rows.

Create payloads validate form input (required fields, numeric ranges)
and provide .to_insert_dict(); partial updates provide .to_update_dict()
with only the fields that were sent.
"""

from jeffy_shared.models.catalog import CategoryIn, ProductIn, ProductUpdate, VariantIn
from jeffy_shared.models.logistics import (
    DeliveryStatusUpdate,
    DriverIn,
    DriverLocation,
    DriverUpdate,
    EtaRequest,
    LatLng,
)
from jeffy_shared.models.orders import (
    AssignDriver,
    BulkStatusUpdate,
    OrderCreate,
    OrderItemIn,
    StatusUpdate,
)
from jeffy_shared.models.procurement import (
    AllocationCreate,
    AllocationIn,
    AllocationUpdate,
    BatchCreate,
    DistributorIn,
    FinancialsRequest,
    FranchiseIn,
    QueueItemCreate,
    QueueItemUpdate,
    ReorderRequestIn,
    ShipmentCreate,
    ShipmentItemIn,
    ShipmentUpdate,
    StockOrderCreate,
    StockOrderItemIn,
    StockOrderUpdate,
)
from jeffy_shared.models.referrals import (
    PromoApply,
    PromoValidate,
    ReferralSettings,
    ReferralSignup,
    ReferralVerify,
)
from jeffy_shared.models.users import (
    CartPayload,
    ProductRequestIn,
    ProfileUpdate,
    SavedAddressIn,
    UserAction,
    UserCreate,
)
from jeffy_shared.models.wants import (
    AssignmentNotify,
    ComingSoonSignupIn,
    WantApprovalIn,
    WantRequestIn,
    WantShippingIn,
    WantStatusUpdate,
    extract_keywords,
)

__all__ = [
    "AllocationCreate",
    "AllocationIn",
    "AllocationUpdate",
    "AssignDriver",
    "AssignmentNotify",
    "BatchCreate",
    "BulkStatusUpdate",
    "CartPayload",
    "CategoryIn",
    "ComingSoonSignupIn",
    "DeliveryStatusUpdate",
    "DistributorIn",
    "DriverIn",
    "DriverLocation",
    "DriverUpdate",
    "EtaRequest",
    "FinancialsRequest",
    "FranchiseIn",
    "LatLng",
    "OrderCreate",
    "OrderItemIn",
    "ProductIn",
    "ProductRequestIn",
    "ProductUpdate",
    "ProfileUpdate",
    "PromoApply",
    "PromoValidate",
    "QueueItemCreate",
    "QueueItemUpdate",
    "ReferralSettings",
    "ReferralSignup",
    "ReferralVerify",
    "ReorderRequestIn",
    "SavedAddressIn",
    "ShipmentCreate",
    "ShipmentItemIn",
    "ShipmentUpdate",
    "StatusUpdate",
    "StockOrderCreate",
    "StockOrderItemIn",
    "StockOrderUpdate",
    "UserAction",
    "UserCreate",
    "VariantIn",
    "WantApprovalIn",
    "WantRequestIn",
    "WantShippingIn",
    "WantStatusUpdate",
    "extract_keywords",
]
