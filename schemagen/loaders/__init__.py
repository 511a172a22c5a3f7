"""
Loader interface for schema introspection.

A loader produces raw schema facts for one schema name. Each engine gets its
own implementation; the IR builder turns the facts into a Schema.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..codegen.core.errors import LoadError


@dataclass
class RawEnum:
    name: str
    comment: str = ""


@dataclass
class RawEnumValue:
    name: str
    ordinal: int
    const_value: Optional[int] = None


@dataclass
class RawProc:
    name: str
    return_type: str = "void"
    comment: str = ""


@dataclass
class RawProcParam:
    name: str
    type: str
    ordinal: int


@dataclass
class RawTable:
    name: str
    type: str = "table"
    manual: bool = False
    comment: str = ""


@dataclass
class RawColumn:
    name: str
    data_type: str
    ordinal: int
    not_null: bool = False
    default: Optional[str] = None
    is_primary: bool = False
    is_sequence: bool = False
    comment: str = ""


@dataclass
class RawIndex:
    name: str
    is_unique: bool = False
    is_primary: bool = False


@dataclass
class RawIndexColumn:
    column: str
    seq_no: int


@dataclass
class RawForeignKey:
    name: str
    column: str
    ref_table: str
    ref_column: str


class Loader(ABC):
    """
    Abstract producer of raw schema facts.

    Implementations wrap driver-specific failures in LoadError.
    """

    driver: str = ""

    def schema_name(self) -> str:
        """Return the default schema name for this connection."""
        return ""

    @abstractmethod
    def enums(self, schema: str) -> List[RawEnum]:
        pass

    @abstractmethod
    def enum_values(self, schema: str, enum: str) -> List[RawEnumValue]:
        pass

    @abstractmethod
    def procs(self, schema: str) -> List[RawProc]:
        pass

    @abstractmethod
    def proc_params(self, schema: str, proc: str) -> List[RawProcParam]:
        pass

    @abstractmethod
    def tables(self, schema: str, kind: str) -> List[RawTable]:
        """Return tables of the given kind ('table' or 'view')."""
        pass

    @abstractmethod
    def table_columns(self, schema: str, table: str) -> List[RawColumn]:
        pass

    @abstractmethod
    def indexes(self, schema: str, table: str) -> List[RawIndex]:
        pass

    @abstractmethod
    def index_columns(self, schema: str, table: str, index: str) -> List[RawIndexColumn]:
        pass

    @abstractmethod
    def foreign_keys(self, schema: str, table: str) -> List[RawForeignKey]:
        pass


__all__ = [
    "Loader",
    "LoadError",
    "RawEnum",
    "RawEnumValue",
    "RawProc",
    "RawProcParam",
    "RawTable",
    "RawColumn",
    "RawIndex",
    "RawIndexColumn",
    "RawForeignKey",
]
