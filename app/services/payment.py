"""
Ödeme sağlayıcı arayüzü. Sipariş oluşturulmadan önce tahsilat yapılır;
gerçek entegrasyon kapsam dışı, varsayılan sağlayıcı her zaman başarılı döner.
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class PaymentRequest:
    amount: Decimal
    currency: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class PaymentResult:
    success: bool
    provider_payment_id: str | None = None
    error_message: str | None = None


class PaymentProvider(ABC):
    @abstractmethod
    def pay(self, request: PaymentRequest) -> PaymentResult: ...


class MockPaymentProvider(PaymentProvider):
    def pay(self, request: PaymentRequest) -> PaymentResult:
        return PaymentResult(success=True, provider_payment_id=f"mock_{int(time.time() * 1000)}")
