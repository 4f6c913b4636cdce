from __future__ import annotations


class DomainError(Exception):
    """Base para erros de dominio."""


class AuthenticationError(DomainError):
    """Credenciais ou sessao invalidas; o usuario precisa autenticar de novo."""


class InvalidCredentialsError(AuthenticationError):
    """Email ou senha invalidos."""


class SessionInvalidError(AuthenticationError):
    """Sessao inexistente, encerrada ou expirada."""


class OAuthTokenValidationError(AuthenticationError):
    """Token do provedor OAuth nao pode ser validado."""


class UserInactiveError(AuthenticationError):
    """Usuario desativado."""


class AuthorizationError(DomainError):
    """Recurso exige upgrade de plano."""


class FeatureAccessDeniedError(AuthorizationError):
    """Plano atual nao inclui a funcionalidade."""


class ValidationError(DomainError):
    """Entrada malformada; nao deve ser repetida."""


class InvalidPlanError(ValidationError):
    """Plano inexistente ou nao vendavel."""


class InvalidReferenceError(ValidationError):
    """Referencia de pagamento nao identifica usuario e plano."""


class PaymentOwnershipError(ValidationError):
    """Pagamento pertence a outro usuario."""


class UnsupportedOAuthProviderError(ValidationError):
    """Provedor OAuth desconhecido."""


class WebhookSignatureError(ValidationError):
    """Assinatura do webhook invalida."""


class ConflictError(DomainError):
    """Conflito com estado existente."""


class EmailAlreadyExistsError(ConflictError):
    """Email ja cadastrado."""


class AccountLinkRequiredError(ConflictError):
    """Conta existente com o mesmo email exige vinculo explicito."""


class NotFoundError(DomainError):
    """Registro solicitado nao existe."""


class UserNotFoundError(NotFoundError):
    """Usuario nao encontrado."""


class SubscriptionNotFoundError(NotFoundError):
    """Usuario sem assinatura."""


class PaymentError(DomainError):
    """Pagamento nao chegou a um estado de sucesso."""


class PaymentNotSuccessfulError(PaymentError):
    """Pagamento ainda nao aprovado ou recusado."""


class PaymentExpiredError(PaymentError):
    """Pagamento expirou antes da aprovacao."""


class UpstreamProviderError(DomainError):
    """Provedor externo indisponivel ou resposta malformada."""


class BillingProviderError(UpstreamProviderError):
    """Falha na comunicacao com o provedor de pagamento."""


class AiProviderError(UpstreamProviderError):
    """Falha na comunicacao com o provedor de IA."""
