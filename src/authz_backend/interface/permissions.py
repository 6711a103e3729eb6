from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class AccessKind(str, Enum):
    """Category of action a capability applies to."""
    Read = "Read"
    Write = "Write"
    Create = "Create"
    Delete = "Delete"
    Other = "Other"


ACCESS_KIND_ORDER: List[AccessKind] = list(AccessKind)


class CapabilityBit(str, Enum):
    act = "act"
    delegate = "delegate"
    super_delegate = "super_delegate"


# Bits a grantor must hold (any of them) to write the key bit on someone else.
# super_delegate has no entry and is never written through delegation.
GRANTING_AUTHORITY: Dict[CapabilityBit, tuple] = {
    CapabilityBit.act: (CapabilityBit.delegate, CapabilityBit.super_delegate),
    CapabilityBit.delegate: (CapabilityBit.super_delegate,),
}


class CapabilityBitset(BaseModel):
    """The act / delegate / super_delegate triple held for one access kind."""

    act: bool = False
    delegate: bool = False
    super_delegate: bool = False

    model_config = ConfigDict(frozen=True)

    def has(self, bit: CapabilityBit) -> bool:
        return getattr(self, bit.value)

    def merge(self, other: "CapabilityBitset") -> "CapabilityBitset":
        """Bitwise OR of two bitsets."""
        return CapabilityBitset(
            act=self.act or other.act,
            delegate=self.delegate or other.delegate,
            super_delegate=self.super_delegate or other.super_delegate,
        )

    def is_empty(self) -> bool:
        return not (self.act or self.delegate or self.super_delegate)


class OrderDir(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class AccessKindBits(BaseModel):
    kind: AccessKind = Field(description="Access kind")
    act: bool = Field(False, description="May perform the action")
    delegate: bool = Field(False, description="May grant act to others")
    super_delegate: bool = Field(False, description="May grant delegate and act to others")

    @classmethod
    def from_bitset(cls, kind: AccessKind, bitset: CapabilityBitset) -> "AccessKindBits":
        return cls(kind=kind, act=bitset.act, delegate=bitset.delegate, super_delegate=bitset.super_delegate)


class PermissionInfo(BaseModel):
    resource_key: str = Field(description="Resource key")
    display_name: str = Field(description="Resource display name")
    access_kinds: List[AccessKindBits] = Field(default_factory=list, description="Capability bits per access kind")
    group_id: Optional[str] = Field(None, description="Group scope, null for global")

    def bits(self, kind: AccessKind) -> Optional[AccessKindBits]:
        for entry in self.access_kinds:
            if entry.kind == kind:
                return entry
        return None


class PermissionListResponse(BaseModel):
    permission_list: List[PermissionInfo]
    total_count: int


class RequestedBits(BaseModel):
    """Bits requested for one access kind; unset bits are left untouched."""
    kind: AccessKind
    act: Optional[bool] = None
    delegate: Optional[bool] = None
    super_delegate: Optional[bool] = None

    def requested(self) -> Dict[CapabilityBit, bool]:
        return {
            bit: getattr(self, bit.value)
            for bit in CapabilityBit
            if getattr(self, bit.value) is not None
        }


class NewPermission(BaseModel):
    resource_key: str = Field(min_length=1, max_length=255)
    bits: List[RequestedBits] = Field(default_factory=list)


class DelegatePermissionsRequest(BaseModel):
    new_permissions: List[NewPermission]


class DelegatePermissionsResponse(BaseModel):
    updated_permissions: List[str]
