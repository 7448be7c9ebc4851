"""
Parcel Status Enumeration.
"""

import enum


class ParcelStatus(str, enum.Enum):
    """
    Parcel status enumeration.

    Values are the labels used on the wire.

    Status flow:
        PENDING → ACCEPTED → IN_TRANSIT → DELIVERED
        Any non-terminal status can transition to DECLINED
        DELIVERED and DECLINED are terminal
    """
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"
    DECLINED = "Declined"


class ParcelAction(str, enum.Enum):
    """Actions a user can trigger on a parcel."""
    ACCEPT = "Accept"
    DISPATCH = "Dispatch"
    DECLINE = "Decline"
    DELETE = "Delete"
    CONFIRM_RECEIPT = "Confirm Receipt"
    REPORT_ISSUE = "Report Issue"
