from pydantic import BaseModel, Field
from typing import List, Optional
from teraspend.core.models.utxo import UTXOEntry

# Bin names
BIN_LOCKED = "locked"
BIN_CREATING = "creating"
BIN_CONFLICTING = "conflicting"
BIN_MINED = "mined"
BIN_SPENT_COUNT = "spentCount"
BIN_UTXOS = "utxos"
BIN_PRESERVE_UNTIL = "preserveUntil"
BIN_DELETE_AT_HEIGHT = "deleteAtHeight"
BIN_REASSIGNMENTS = "reassignments"
BIN_SPENDING_HEIGHT = "spendingHeight"


class BlockRef(BaseModel):
    block_id: int = Field(..., description="ID of the block containing the transaction")
    block_height: int = Field(0, ge=0, description="Height of that block")
    subtree_idx: int = Field(0, ge=0, description="Subtree of the block holding the transaction")

    def to_bin(self) -> dict:
        return {
            "blockID": self.block_id,
            "blockHeight": self.block_height,
            "subtreeIdx": self.subtree_idx,
        }

    @classmethod
    def from_bin(cls, value: dict) -> "BlockRef":
        return cls(
            block_id=value["blockID"],
            block_height=value.get("blockHeight", 0),
            subtree_idx=value.get("subtreeIdx", 0),
        )


class Reassignment(BaseModel):
    index: int = Field(..., ge=0, description="Output that changed owner")
    previous_owner: Optional[str] = Field(None, description="Owner before the reassignment")
    new_owner: str = Field(..., description="Owner after the reassignment")
    block_height: int = Field(0, description="Block height the reassignment was made at")

    def to_bin(self) -> dict:
        return {
            "index": self.index,
            "previousOwner": self.previous_owner,
            "newOwner": self.new_owner,
            "blockHeight": self.block_height,
        }

    @classmethod
    def from_bin(cls, value: dict) -> "Reassignment":
        return cls(
            index=value["index"],
            previous_owner=value.get("previousOwner"),
            new_owner=value["newOwner"],
            block_height=value.get("blockHeight", 0),
        )


class UTXORecord(BaseModel):
    locked: bool = Field(False, description="Blocks every mutation except setLocked")
    creating: bool = Field(False, description="Set while the transaction is still being written")
    conflicting: bool = Field(False, description="Marks the transaction as in conflict")
    mined: Optional[BlockRef] = Field(None, description="Block the transaction was mined in")
    spent_count: int = Field(0, ge=0, description="Number of outputs currently spent")
    outputs: List[UTXOEntry] = Field(default_factory=list, description="Outputs by index")
    preserve_until: Optional[int] = Field(None, description="Block height the record is kept until")
    delete_at_height: Optional[int] = Field(None, description="Block height the record expires at")
    reassignments: List[Reassignment] = Field(
        default_factory=list, description="History of owner reassignments"
    )
    spending_height: Optional[int] = Field(
        None, description="Block height a coinbase transaction's outputs mature at"
    )

    def count_spent(self) -> int:
        return sum(1 for entry in self.outputs if entry.is_spent())

    def all_spent(self) -> bool:
        return bool(self.outputs) and self.spent_count == len(self.outputs)

    def to_bins(self) -> dict:
        """Encode the record as host bins. Unset optional fields map to None."""
        return {
            BIN_LOCKED: self.locked,
            BIN_CREATING: self.creating,
            BIN_CONFLICTING: self.conflicting,
            BIN_MINED: self.mined.to_bin() if self.mined is not None else None,
            BIN_SPENT_COUNT: self.spent_count,
            BIN_UTXOS: [entry.to_bin() for entry in self.outputs],
            BIN_PRESERVE_UNTIL: self.preserve_until,
            BIN_DELETE_AT_HEIGHT: self.delete_at_height,
            BIN_REASSIGNMENTS: [r.to_bin() for r in self.reassignments],
            BIN_SPENDING_HEIGHT: self.spending_height,
        }

    @classmethod
    def from_bins(cls, bins: dict) -> "UTXORecord":
        mined = bins.get(BIN_MINED)
        return cls(
            locked=bool(bins.get(BIN_LOCKED, False)),
            creating=bool(bins.get(BIN_CREATING, False)),
            conflicting=bool(bins.get(BIN_CONFLICTING, False)),
            mined=BlockRef.from_bin(mined) if mined is not None else None,
            spent_count=bins.get(BIN_SPENT_COUNT, 0) or 0,
            outputs=[UTXOEntry.from_bin(u) for u in bins.get(BIN_UTXOS) or []],
            preserve_until=bins.get(BIN_PRESERVE_UNTIL),
            delete_at_height=bins.get(BIN_DELETE_AT_HEIGHT),
            reassignments=[
                Reassignment.from_bin(r) for r in bins.get(BIN_REASSIGNMENTS) or []
            ],
            spending_height=bins.get(BIN_SPENDING_HEIGHT),
        )

    def is_coinbase_immature(self, current_block_height: int) -> bool:
        return bool(self.spending_height) and self.spending_height > current_block_height

    @classmethod
    def new(cls, output_count: int, owner: Optional[str] = None) -> "UTXORecord":
        """Create a record with ``output_count`` unspent outputs."""
        return cls(
            outputs=[UTXOEntry(index=i, owner=owner) for i in range(output_count)]
        )
