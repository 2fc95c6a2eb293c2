import enum

class Role(str, enum.Enum):
    patient = "patient"
    healthcare_provider = "healthcare_provider"
    facility_admin = "facility_admin"
    admin = "admin"
    delivery_agent = "delivery_agent"

class FacilityType(str, enum.Enum):
    clinic = "clinic"
    pharmacy = "pharmacy"
    hospital = "hospital"

class PrescriptionStatus(str, enum.Enum):
    draft = "draft"
    issued = "issued"
    fulfilled = "fulfilled"
    cancelled = "cancelled"
    revoked = "revoked"

class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    ready_for_pickup = "ready_for_pickup"
    out_for_delivery = "out_for_delivery"
    delivered = "delivered"
    cancelled = "cancelled"

class NotificationType(str, enum.Enum):
    order_created = "order_created"
    order_status_changed = "order_status_changed"
    order_delivered = "order_delivered"
    order_cancelled = "order_cancelled"

class NotificationChannel(str, enum.Enum):
    in_app = "in_app"
