class PricingError(ValueError):
    """Base exception para erros de precificação"""
    pass


class InvalidInput(PricingError):
    """Conjunto de faixas ausente, vazio ou inconsistente"""
    pass


class NoApplicableTier(PricingError):
    """Nenhuma faixa cobre a quantidade solicitada"""

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(f"Nenhuma faixa de preço aplicável para a quantidade: {quantity}")
