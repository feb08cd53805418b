"""
Dependency injection container implementation.
Holds the long-lived collaborators of the service and wires them together.
"""

from datetime import timedelta
from typing import Any, Dict, Optional, Type, TypeVar
import structlog

from ..core.config import Settings
from ..core.database import DatabaseManager
from ..core.redis import RedisManager
from ..interfaces.code_store_interface import ICodeStore
from ..interfaces.notifier_interface import INotifier
from ..interfaces.repository_interface import IAccountRepository
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.email_notifier import build_notifier
from ..repositories.account_repository import AccountRepository
from ..services.auth.authentication_service import AuthenticationService
from ..services.auth.token_service import TokenService
from ..stores.code_store import RedisCodeStore

logger = structlog.get_logger()

T = TypeVar('T')


class Container:
    """Dependency injection container."""

    def __init__(self):
        self._singletons: Dict[str, Any] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def register_instance(self, interface: Type[T], instance: T) -> None:
        """
        Register a specific instance for an interface.

        Args:
            interface: Interface type
            instance: Instance to register
        """
        key = interface.__name__
        self._singletons[key] = instance
        logger.debug("Registered instance", interface=key, instance=type(instance).__name__)

    def has(self, interface: Type[Any]) -> bool:
        return interface.__name__ in self._singletons

    def get(self, interface: Type[T]) -> T:
        """
        Get service instance by interface type.

        Raises:
            ValueError: If service is not registered
        """
        key = interface.__name__
        if key in self._singletons:
            return self._singletons[key]

        raise ValueError(f"Service not registered: {key}")

    def wire_services(
        self,
        settings: Settings,
        account_repository: IAccountRepository,
        code_store: ICodeStore,
        notifier: INotifier,
    ) -> None:
        """
        Build the service graph on top of the given storage and delivery backends.

        Used directly by tests with in-memory backends; ``initialize`` calls it
        with the production ones.
        """
        dispatcher = NotificationDispatcher(
            notifier,
            workers=settings.NOTIFIER_WORKERS,
            queue_size=settings.NOTIFIER_QUEUE_SIZE,
        )
        token_service = TokenService(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            access_token_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_token_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

        self.register_instance(Settings, settings)
        self.register_instance(IAccountRepository, account_repository)
        self.register_instance(ICodeStore, code_store)
        self.register_instance(INotifier, notifier)
        self.register_instance(NotificationDispatcher, dispatcher)
        self.register_instance(TokenService, token_service)
        self.register_instance(
            AuthenticationService,
            AuthenticationService(
                account_repository=account_repository,
                code_store=code_store,
                notification_dispatcher=dispatcher,
                token_service=token_service,
                code_ttl_seconds=settings.OTP_EXPIRY_SECONDS,
            ),
        )
        self._initialized = True

    async def initialize(self, settings: Settings) -> None:
        """Connect to the database and Redis, then wire the services."""
        if self._initialized:
            return

        try:
            database = DatabaseManager(settings)
            database.initialize()
            self.register_instance(DatabaseManager, database)

            redis_manager = RedisManager(settings)
            await redis_manager.initialize()
            self.register_instance(RedisManager, redis_manager)

            self.wire_services(
                settings,
                account_repository=AccountRepository(database.session_factory),
                code_store=RedisCodeStore(redis_manager.client),
                notifier=build_notifier(settings),
            )
            logger.info("Dependency injection container initialized successfully")

        except Exception as e:
            logger.error("Failed to initialize container", error=str(e))
            await self.cleanup()
            raise

    async def startup(self) -> None:
        """Start background workers."""
        if self.has(NotificationDispatcher):
            self.get(NotificationDispatcher).start()

    async def cleanup(self) -> None:
        """Stop workers and release connections, in reverse order of creation."""
        if self.has(NotificationDispatcher):
            await self.get(NotificationDispatcher).stop()

        for manager_type in (RedisManager, DatabaseManager):
            if not self.has(manager_type):
                continue
            try:
                await self.get(manager_type).close()
            except Exception as e:
                logger.error("Failed to close resource", resource=manager_type.__name__, error=str(e))

        logger.info("Container cleanup completed")


def build_container(settings: Optional[Settings] = None) -> Container:
    """Create an empty container; ``initialize`` is awaited by the app lifespan."""
    container = Container()
    if settings is not None:
        container.register_instance(Settings, settings)
    return container
