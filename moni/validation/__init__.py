"""Import/export validation package."""

from moni.validation.validator import (
    DataSetValidator,
    export_blob,
    import_blob,
)

__all__ = ["DataSetValidator", "export_blob", "import_blob"]
