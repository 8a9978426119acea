from dataclasses import dataclass, field
from typing import List, Optional

@dataclass
class ColumnIR:
    """Column definition as reported by the catalog"""
    name: str
    type: str  # full COLUMN_TYPE, e.g. varchar(255), enum('A','B')
    nullable: bool = True
    default_value: Optional[str] = None
    extra: str = ""  # auto_increment, on update CURRENT_TIMESTAMP, ...

@dataclass
class KeyIR:
    """Named unique constraint or secondary index"""
    name: str
    columns: List[str]
    unique: bool = False

@dataclass
class ForeignKeyIR:
    """Single-column foreign key reference"""
    name: str
    column: str
    ref_table: str
    ref_column: str

@dataclass
class TableIR:
    """Table definition in IR"""
    name: str
    columns: List[ColumnIR] = field(default_factory=list)
    primary_key: List[str] = field(default_factory=list)
    unique_keys: List[KeyIR] = field(default_factory=list)
    indexes: List[KeyIR] = field(default_factory=list)
    foreign_keys: List[ForeignKeyIR] = field(default_factory=list)

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[ColumnIR]:
        for col in self.columns:
            if col.name == name:
                return col
        return None
