from .errors import DuplicateRecordError, PersistenceError
from .unit_of_work import AbstractUnitOfWork, SqlUnitOfWork, UnitOfWorkFactory

__all__ = [
    "AbstractUnitOfWork",
    "DuplicateRecordError",
    "PersistenceError",
    "SqlUnitOfWork",
    "UnitOfWorkFactory",
]
