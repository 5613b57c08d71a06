from abc import ABC
from typing import Generic, List, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from wishub.database.redis_manager import RedisManager
from wishub.errors import StoreError

T = TypeVar("T", bound=BaseModel)


class CollectionService(ABC, Generic[T]):
    """
    An ordered array of entities stored as one JSON value under a single key.

    Every mutation reads the whole array, changes it in memory and writes the
    whole array back. Two writers racing on the same key lose one update
    (last write wins); there is no versioning.
    """

    key: str
    model: Type[T]

    def __init__(self, manager: RedisManager) -> None:
        self.manager = manager

    def _load(self) -> List[T]:
        raw = self.manager.get(self.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StoreError(f"Expected a JSON array under {self.key!r}",
                             details=f"found {type(raw).__name__}")
        try:
            return [self.model.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            raise StoreError(f"Malformed record under {self.key!r}", details=str(e)) from e

    def _save(self, items: Sequence[T]) -> None:
        self.manager.set(self.key, [item.model_dump(exclude_none=True) for item in items])
