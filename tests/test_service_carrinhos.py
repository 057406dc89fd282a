from datetime import datetime, timedelta

import pytest

from app.api.mesas.core.exceptions import CartNotFoundError
from app.api.mesas.services.service_carrinhos import CarrinhoRegistry


class Relogio:
    def __init__(self):
        self.agora = datetime(2024, 5, 10, 12, 0)

    def __call__(self):
        return self.agora

    def avancar(self, **delta):
        self.agora += timedelta(**delta)


@pytest.fixture()
def relogio():
    return Relogio()


@pytest.fixture()
def registry(relogio):
    return CarrinhoRegistry(ttl=timedelta(minutes=30), relogio=relogio)


def test_carrinho_parado_expira_e_o_usado_continua(registry, relogio):
    parado = registry.criar(mesa_id=1)
    em_uso = registry.criar(mesa_id=2)

    relogio.avancar(minutes=20)
    registry.obter(em_uso)
    relogio.avancar(minutes=15)

    with pytest.raises(CartNotFoundError):
        registry.obter(parado)
    assert registry.obter(em_uso).mesa_id == 2
    assert len(registry) == 1


def test_limpar_carrinhos_expirados(registry, relogio):
    registry.criar(mesa_id=1)
    registry.criar(mesa_id=2)

    assert registry.limpar_carrinhos_expirados() == 0
    relogio.avancar(minutes=31)
    assert registry.limpar_carrinhos_expirados() == 2
    assert len(registry) == 0


def test_descartar(registry):
    carrinho_id = registry.criar(mesa_id=1)
    registry.descartar(carrinho_id)

    with pytest.raises(CartNotFoundError):
        registry.descartar(carrinho_id)
    with pytest.raises(CartNotFoundError):
        registry.obter(carrinho_id)
