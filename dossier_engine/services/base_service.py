from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.database import transaction, translate_store_errors
from dossier_engine.core.exceptions import ValidationError
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseService:
    """Base class for application services.

    Gives every service the session it works on, the store's transaction
    scope and payload validation that reports failures as the
    application's ``ValidationError``.
    """

    def __init__(self, session: AsyncSession):
        """Initialize the service.

        Args:
            session: Database session shared by the service's repositories
        """
        self.session = session
        self.logger = LOGGER

    def transaction(self):
        """Scope a unit of work; commits on success, rolls back on error."""
        return transaction(self.session)

    def reading(self):
        """Scope a read so store outages surface as ``StoreUnavailable``."""
        return translate_store_errors()

    @staticmethod
    def parse(schema: Type[SchemaType], payload: Any) -> SchemaType:
        """Validate ``payload`` against ``schema``.

        Args:
            schema: Pydantic model describing the payload
            payload: Model instance or mapping

        Returns:
            The validated model

        Raises:
            ValidationError: If the payload does not satisfy the schema
        """
        if isinstance(payload, schema):
            return payload
        try:
            return schema.model_validate(payload)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}"
                for error in e.errors()
            )
            raise ValidationError(f"Invalid {schema.__name__}: {problems}", original_error=e) from e
