from curalink.application.services.account_service import AccountService
from curalink.application.services.assistant_service import AssistantReply, AssistantService
from curalink.application.services.connection_service import ConnectionService
from curalink.application.services.conversation_service import ConversationService
from curalink.application.services.external_data_service import ExternalDataService
from curalink.application.services.favorites_service import FavoritesService
from curalink.application.services.identity_resolver import IdentityResolver, require_role
from curalink.application.services.message_service import MessageService
from curalink.application.services.notification_service import NotificationService
from curalink.application.services.resend_service import ResendEmailService

__all__ = [
    "AccountService",
    "AssistantReply",
    "AssistantService",
    "ConnectionService",
    "ConversationService",
    "ExternalDataService",
    "FavoritesService",
    "IdentityResolver",
    "MessageService",
    "NotificationService",
    "ResendEmailService",
    "require_role",
]
