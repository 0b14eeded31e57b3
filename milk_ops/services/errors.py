class SubscriptionValidationError(ValueError):
    """Dados de assinatura inválidos; nunca chegam ao banco."""


class SubscriptionNotFoundError(LookupError):
    def __init__(self, subscription_id: int):
        super().__init__(f"Assinatura {subscription_id} não encontrada")
        self.subscription_id = subscription_id


class PersistenceError(RuntimeError):
    """Falha de leitura/escrita no banco; não há retry automático."""
