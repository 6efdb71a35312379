# -*- coding: utf-8 -*-
"""
Payment Service
Integração com o processador de pagamentos (API de Payment Intents) para o checkout.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from config import settings

# Configuração de logging estruturado
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class PaymentServiceError(Exception):
    """Base exception para erros do PaymentService"""
    pass


class PaymentAuthError(PaymentServiceError):
    """Chave secreta inválida ou autenticação falhou"""
    pass


class PaymentTimeoutError(PaymentServiceError):
    """Timeout na requisição"""
    pass


class PaymentIntent(BaseModel):
    id: str
    client_secret: Optional[str] = None
    amount: int
    currency: str
    status: Optional[str] = None


def _log_safe_request(url: str, has_key: bool, **kwargs):
    """Log de requisição sem expor a chave secreta"""
    logger.info(f"Payment API Request: {url}, authenticated: {has_key}, params: {list(kwargs.keys())}")


def _flatten_metadata(metadata: Dict[str, Any]) -> Dict[str, str]:
    """metadata[chave]=valor, formato form-encoded esperado pela API"""
    return {f"metadata[{key}]": str(value) for key, value in metadata.items()}


def _error_message(response: httpx.Response) -> str:
    fallback = f"Erro HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or fallback
    if isinstance(error, str) and error:
        return f"{fallback}: {error}"
    return fallback


class PaymentGateway:
    """
    Cliente assíncrono do processador de pagamentos.

    O valor é sempre informado em centavos (unidade mínima da moeda);
    a conversão do total do carrinho é responsabilidade de quem chama.
    """

    def __init__(
            self,
            api_base: Optional[str] = None,
            secret_key: Optional[str] = None,
            timeout: Optional[float] = None,
            max_retries: Optional[int] = None,
            backoff: float = 2.0,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = (api_base or settings.payment_api_base).rstrip("/")
        self.secret_key = secret_key if secret_key is not None else settings.payment_secret_key
        self.timeout = timeout if timeout is not None else settings.payment_timeout
        self.max_retries = max_retries if max_retries is not None else settings.payment_max_retries
        self.backoff = backoff
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            headers={"Authorization": f"Bearer {self.secret_key}"},
        )

    async def create_payment_intent(
            self,
            amount: int,
            currency: str,
            metadata: Optional[Dict[str, Any]] = None,
    ) -> PaymentIntent:
        """
        Cria um Payment Intent com retry exponencial.

        Args:
            amount: Valor em centavos
            currency: Código da moeda (ex: "usd")
            metadata: Dados livres anexados ao pagamento

        Returns:
            PaymentIntent com id e client_secret

        Raises:
            PaymentAuthError: Chave secreta inválida
            PaymentTimeoutError: Timeout em todas as tentativas
            PaymentServiceError: Outros erros
        """
        if not self.secret_key or not self.secret_key.strip():
            raise PaymentAuthError("Chave secreta não configurada")

        if amount <= 0:
            raise PaymentServiceError(f"Valor inválido para pagamento: {amount}")

        url = f"{self.api_base}/payment_intents"
        payload = {"amount": str(amount), "currency": currency}
        payload.update(_flatten_metadata(metadata or {}))

        last_error: Optional[PaymentServiceError] = None
        total_attempts = self.max_retries + 1

        for attempt in range(total_attempts):
            if attempt > 0:
                delay = self.backoff * (2 ** (attempt - 1))
                logger.info(f"Tentativa {attempt + 1}/{total_attempts} após {delay}s")
                await asyncio.sleep(delay)

            _log_safe_request(url, has_key=True, amount=amount, currency=currency)

            async with self._client() as client:
                try:
                    response = await client.post(url, data=payload, timeout=self.timeout)
                except httpx.TimeoutException:
                    logger.warning(f"Timeout ao criar payment intent (tentativa {attempt + 1})")
                    last_error = PaymentTimeoutError("Timeout ao criar pagamento")
                    continue
                except httpx.HTTPError as e:
                    logger.warning(f"Erro de conexão com a API de pagamentos: {e}")
                    last_error = PaymentServiceError(f"Erro de conexão: {e}")
                    continue

            if response.status_code == 401:
                raise PaymentAuthError("Chave secreta inválida")

            if response.status_code >= 500:
                logger.warning(f"Payment API indisponível: HTTP {response.status_code}")
                last_error = PaymentServiceError(_error_message(response))
                continue

            if response.status_code >= 400:
                raise PaymentServiceError(_error_message(response))

            intent = PaymentIntent.model_validate(response.json())
            logger.info(f"Payment intent {intent.id} criado ({intent.amount} {intent.currency})")
            return intent

        logger.error(f"Falha ao criar payment intent após {total_attempts} tentativas")
        raise last_error or PaymentServiceError("Falha ao criar pagamento")


def to_minor_units(amount) -> int:
    """Converte um valor monetário (ex: Decimal('632.50')) para centavos"""
    return int(round(amount * 100))
