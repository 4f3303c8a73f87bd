"""Shared plumbing for the checkout application services.

Each call runs inside its own domain context and dispatches one command
synchronously. Handlers lock the rows they change, so concurrent commands
apply one after another. A command that still loses a version race is retried
with a fresh read. Outcomes come back as ``Ok``/``Err`` values, never as
exceptions.
"""

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from mustore.checkout.errors import CheckoutError, NotFound, StoreFailure
from mustore.checkout.result import Err, Ok
from mustore.utils.locking import serialized_writes

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class DomainService:
    def __init__(self, domain, max_attempts: int | None = None):
        self.domain = domain
        if max_attempts is None:
            custom = domain.config.get("custom", {}) or {}
            max_attempts = int(custom.get("max_place_order_attempts", DEFAULT_MAX_ATTEMPTS))
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts

    def _dispatch(self, command, not_found: tuple[str, str], present=None):
        """Process ``command`` and return ``Ok`` or ``Err``.

        ``not_found`` names the record reported when the handler cannot load it.
        ``present``, when given, turns the handler's return value into the
        ``Ok`` payload; a failure there is reported as ``StoreFailure``.
        Must be called with a domain context active.
        """
        command_name = type(command).__name__
        for attempt in range(1, self.max_attempts + 1):
            try:
                with serialized_writes(self.domain):
                    value = self.domain.process(command, asynchronous=False)
            except ExpectedVersionError:
                logger.warning(
                    "Concurrent update detected, retrying",
                    command=command_name,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                )
            except CheckoutError as exc:
                logger.info("Command rejected", command=command_name, reason=exc.code, detail=exc.message)
                if isinstance(exc, StoreFailure):
                    logger.error("Store failure", command=command_name, detail=exc.detail)
                return Err(exc)
            except ObjectNotFoundError:
                return Err(NotFound(*not_found))
            except ValidationError as exc:
                logger.info("Command rejected", command=command_name, reason="validation", errors=exc.messages)
                return Err(exc)
            except Exception as exc:
                logger.exception("Unexpected failure while processing command", command=command_name)
                return Err(StoreFailure(str(exc)))
            else:
                return self._present(command_name, value, present)

        logger.error("Giving up after repeated concurrent updates", command=command_name, attempts=self.max_attempts)
        return Err(StoreFailure(f"{command_name} kept conflicting with concurrent updates"))

    def _present(self, command_name, value, present):
        if present is None:
            return Ok(value)
        try:
            return Ok(present(value))
        except Exception as exc:
            # The command is committed; only reading its outcome back failed
            logger.exception("Could not read back command outcome", command=command_name, result=value)
            return Err(StoreFailure(str(exc)))
