import threading
from decimal import Decimal

import pytest

from app.api.mesas.contracts.store_contract import EntityKind
from app.api.mesas.core.carrinho import Carrinho
from app.api.mesas.core.exceptions import (
    EmptyCartError,
    InvalidCustomerCountError,
    InvalidTransitionError,
    ItemPersistenceError,
    SaleNotFoundError,
    StoreError,
    TableInactiveError,
    TableNotAvailableError,
    TableNotFoundError,
    TableUpdateError,
)
from app.api.mesas.models.model_mesa import StatusMesa
from app.api.mesas.models.model_venda_mesa import StatusVendaMesa, TipoPagamento
from app.api.mesas.schemas.schema_venda_mesa import VendaMetaIn
from app.api.mesas.services.service_commit_pedido import CommitPedidoService


class Abortado(BaseException):
    pass


@pytest.fixture()
def svc(store, notifier):
    return CommitPedidoService(store, notifier=notifier)


@pytest.fixture()
def carrinho(catalogo):
    carrinho = Carrinho(catalogo=catalogo)
    carrinho.add_item(catalogo.lookup("A"), quantidade=2)
    return carrinho


def vendas(store):
    return list(store.tabelas[EntityKind.VENDA].values())


def itens(store):
    return list(store.tabelas[EntityKind.VENDA_ITEM].values())


def test_pedido_cria_venda_e_ocupa_mesa(svc, store, notifier, nova_mesa, carrinho):
    mesa = nova_mesa(numero=1, capacidade=4)

    venda = svc.commit_order(mesa["id"], carrinho, VendaMetaIn(valor_desconto=Decimal("0")))

    assert venda.subtotal == Decimal("20.00")
    assert venda.valor_total == Decimal("20.00")
    assert venda.status is StatusVendaMesa.ABERTA
    assert venda.operador_nome == "Sistema"
    assert [(i.produto_codigo, i.quantidade, i.subtotal) for i in venda.itens] == [("A", 2, Decimal("20.00"))]

    registro = store.get(EntityKind.MESA, mesa["id"])
    assert registro["status"] is StatusMesa.OCUPADA
    assert registro["venda_atual_id"] == venda.id
    assert carrinho.is_empty
    assert notifier.enviadas == [("success", "Pedido criado para Mesa 1!")]


def test_desconto_maior_que_subtotal_zera_total(svc, nova_mesa, carrinho):
    mesa = nova_mesa(numero=1, capacidade=4)

    venda = svc.commit_order(mesa["id"], carrinho, VendaMetaIn(valor_desconto=Decimal("25.00")))

    assert venda.subtotal == Decimal("20.00")
    assert venda.valor_total == Decimal("0.00")
    assert venda.valor_desconto == Decimal("20.00")


def test_troco_calculado_a_partir_do_valor_recebido(svc, nova_mesa, carrinho):
    mesa = nova_mesa()
    meta = VendaMetaIn(tipo_pagamento="dinheiro", valor_recebido=Decimal("50"), valor_troco=Decimal("1"))

    venda = svc.commit_order(mesa["id"], carrinho, meta)

    assert venda.tipo_pagamento is TipoPagamento.DINHEIRO
    assert venda.valor_troco == Decimal("30.00")


def test_troco_informado_diretamente(svc, nova_mesa, carrinho):
    mesa = nova_mesa()
    venda = svc.commit_order(mesa["id"], carrinho, VendaMetaIn(tipo_pagamento="pix", valor_troco=Decimal("2.5")))
    assert venda.valor_troco == Decimal("2.50")


def test_item_pesavel_gravado_com_peso(svc, store, nova_mesa, catalogo):
    mesa = nova_mesa()
    carrinho = Carrinho(catalogo=catalogo)
    carrinho.add_item(catalogo.lookup("P"), peso_gramas=Decimal("500"))
    carrinho.add_item(catalogo.lookup("B"))

    venda = svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert venda.subtotal == Decimal("37.45")
    pesado = venda.itens[0]
    assert pesado.peso_gramas == Decimal("500")
    assert pesado.preco_por_grama == Decimal("0.0599")
    assert pesado.valor_desconto == Decimal("0")
    assert len(itens(store)) == 2


@pytest.mark.parametrize("status", [StatusMesa.OCUPADA, StatusMesa.AGUARDANDO_CONTA, StatusMesa.LIMPEZA])
def test_mesa_nao_livre_nao_grava_nada(svc, store, notifier, nova_mesa, carrinho, status):
    venda_atual = 77 if status is not StatusMesa.LIMPEZA else None
    mesa = nova_mesa(status=status, venda_atual_id=venda_atual)
    escritas = len(store.escritas)

    with pytest.raises(TableNotAvailableError):
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert len(store.escritas) == escritas
    assert not carrinho.is_empty
    assert notifier.enviadas[-1][0] == "failure"


def test_mesa_inativa(svc, store, nova_mesa, carrinho):
    mesa = nova_mesa(ativa=False)
    with pytest.raises(TableInactiveError):
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())
    assert vendas(store) == []


def test_mesa_inativa_e_ocupada_reporta_indisponivel(svc, store, nova_mesa, carrinho):
    mesa = nova_mesa(status=StatusMesa.OCUPADA, ativa=False)
    with pytest.raises(TableNotAvailableError):
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())
    assert vendas(store) == []


def test_mesa_ocupada_depois_da_leitura_desfaz_a_venda(svc, store, notifier, nova_mesa, carrinho, monkeypatch):
    mesa = nova_mesa(numero=6)
    insert_original = store.insert

    def insert_e_ocupar(kind, record):
        novo = insert_original(kind, record)
        if EntityKind(kind) is EntityKind.VENDA:
            # outro worker ocupa a mesa entre a leitura e a gravação do status
            store.tabelas[EntityKind.MESA][mesa["id"]]["status"] = StatusMesa.OCUPADA
        return novo

    monkeypatch.setattr(store, "insert", insert_e_ocupar)

    with pytest.raises(TableNotAvailableError) as exc:
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert exc.value.context["status_atual"] == "occupied"
    assert vendas(store) == []
    assert itens(store) == []
    assert store.get(EntityKind.MESA, mesa["id"])["venda_atual_id"] is None
    assert not carrinho.is_empty
    assert notifier.enviadas[-1] == ("failure", exc.value.message)


def test_mesa_inexistente(svc, carrinho):
    with pytest.raises(TableNotFoundError):
        svc.commit_order(404, carrinho, VendaMetaIn())


def test_carrinho_vazio(svc, store, nova_mesa, catalogo):
    mesa = nova_mesa()
    escritas = len(store.escritas)
    with pytest.raises(EmptyCartError) as exc:
        svc.commit_order(mesa["id"], Carrinho(catalogo=catalogo), VendaMetaIn())
    assert str(exc.value) == "Adicione pelo menos um item ao pedido"
    assert len(store.escritas) == escritas


@pytest.mark.parametrize("num_pessoas", [0, 5])
def test_numero_de_pessoas_fora_da_capacidade(svc, store, nova_mesa, carrinho, num_pessoas):
    mesa = nova_mesa(capacidade=4)
    with pytest.raises(InvalidCustomerCountError):
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn(num_pessoas=num_pessoas))
    assert vendas(store) == []


def test_falha_nos_itens_desfaz_a_venda(svc, store, nova_mesa, catalogo):
    mesa = nova_mesa()
    carrinho = Carrinho(catalogo=catalogo)
    carrinho.add_item(catalogo.lookup("A"))
    carrinho.add_item(catalogo.lookup("B"))
    store.falhar("insert", EntityKind.VENDA_ITEM, apos=1)

    with pytest.raises(ItemPersistenceError) as exc:
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert exc.value.compensado is True
    assert exc.value.venda_id is not None
    assert isinstance(exc.value.__cause__, StoreError)
    assert vendas(store) == []
    assert itens(store) == []
    registro = store.get(EntityKind.MESA, mesa["id"])
    assert registro["status"] is StatusMesa.LIVRE
    assert registro["venda_atual_id"] is None
    assert len(carrinho) == 2


def test_falha_ao_desfazer_e_reportada(svc, store, nova_mesa, carrinho):
    mesa = nova_mesa()
    store.falhar("insert", EntityKind.VENDA_ITEM)
    store.falhar("delete", EntityKind.VENDA)

    with pytest.raises(ItemPersistenceError) as exc:
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert exc.value.compensado is False
    assert exc.value.context["compensado"] is False


def test_abortar_durante_itens_desfaz_e_propaga(svc, store, nova_mesa, carrinho):
    mesa = nova_mesa()
    store.falhar("insert", EntityKind.VENDA_ITEM, erro=Abortado())

    with pytest.raises(Abortado):
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert vendas(store) == []


def test_falha_na_mesa_mantem_venda_e_itens(svc, store, notifier, nova_mesa, catalogo):
    mesa = nova_mesa(numero=3)
    carrinho = Carrinho(catalogo=catalogo)
    carrinho.add_item(catalogo.lookup("A"), quantidade=2)
    carrinho.add_item(catalogo.lookup("B"))
    store.falhar("update", EntityKind.MESA)

    with pytest.raises(TableUpdateError) as exc:
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    assert len(vendas(store)) == 1
    venda = vendas(store)[0]
    assert exc.value.venda_id == venda["id"]
    assert exc.value.mesa_id == mesa["id"]
    assert sorted(i["produto_codigo"] for i in itens(store)) == ["A", "B"]
    assert all(i["venda_id"] == venda["id"] for i in itens(store))
    registro = store.get(EntityKind.MESA, mesa["id"])
    assert registro["status"] is StatusMesa.LIVRE
    assert registro["venda_atual_id"] is None
    assert notifier.enviadas[-1][0] == "failure"


def test_finalizar_recupera_mesa_e_e_idempotente(svc, store, nova_mesa, carrinho):
    mesa = nova_mesa(numero=3)
    store.falhar("update", EntityKind.MESA)
    with pytest.raises(TableUpdateError) as exc:
        svc.commit_order(mesa["id"], carrinho, VendaMetaIn())
    store.limpar_falhas()
    venda_id = exc.value.venda_id

    recuperada = svc.finalize_table_state(mesa["id"], venda_id)
    assert recuperada.status is StatusMesa.OCUPADA
    assert recuperada.venda_atual_id == venda_id

    escritas = len(store.escritas)
    de_novo = svc.finalize_table_state(mesa["id"], venda_id)
    assert de_novo.venda_atual_id == venda_id
    assert len(store.escritas) == escritas


def test_finalizar_venda_inexistente(svc, nova_mesa):
    mesa = nova_mesa()
    with pytest.raises(SaleNotFoundError):
        svc.finalize_table_state(mesa["id"], 999)


def test_finalizar_venda_de_outra_mesa(svc, store, nova_mesa, carrinho):
    mesa = nova_mesa(numero=1)
    outra = nova_mesa(numero=2)
    venda = svc.commit_order(mesa["id"], carrinho, VendaMetaIn())

    with pytest.raises(InvalidTransitionError):
        svc.finalize_table_state(outra["id"], venda.id)
    assert store.get(EntityKind.MESA, outra["id"])["status"] is StatusMesa.LIVRE


def test_segundo_pedido_na_mesma_mesa_falha(svc, nova_mesa, catalogo):
    mesa = nova_mesa()
    primeiro = Carrinho(catalogo=catalogo).add_item(catalogo.lookup("A"))
    segundo = Carrinho(catalogo=catalogo).add_item(catalogo.lookup("B"))

    svc.commit_order(mesa["id"], primeiro, VendaMetaIn())
    with pytest.raises(TableNotAvailableError):
        svc.commit_order(mesa["id"], segundo, VendaMetaIn())


def test_pedidos_concorrentes_na_mesma_mesa(svc, store, nova_mesa, catalogo):
    mesa = nova_mesa()
    resultados = []

    def confirmar(codigo):
        carrinho = Carrinho(catalogo=catalogo).add_item(catalogo.lookup(codigo))
        try:
            resultados.append(svc.commit_order(mesa["id"], carrinho, VendaMetaIn()))
        except TableNotAvailableError as e:
            resultados.append(e)

    threads = [threading.Thread(target=confirmar, args=(c,)) for c in ("A", "B")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    erros = [r for r in resultados if isinstance(r, TableNotAvailableError)]
    assert len(resultados) == 2
    assert len(erros) == 1
    assert len(vendas(store)) == 1


def test_falha_do_notificador_nao_afeta_pedido(store, notifier_quebrado, nova_mesa, carrinho):
    svc = CommitPedidoService(store, notifier=notifier_quebrado)
    mesa = nova_mesa()

    venda = svc.commit_order(mesa["id"], carrinho, VendaMetaIn())
    assert store.get(EntityKind.MESA, mesa["id"])["venda_atual_id"] == venda.id


def test_obter_venda(svc, nova_mesa, carrinho):
    mesa = nova_mesa()
    criada = svc.commit_order(mesa["id"], carrinho, VendaMetaIn(cliente_nome="Ana"))

    venda = svc.obter_venda(criada.id)
    assert venda.cliente_nome == "Ana"
    assert len(venda.itens) == 1

    with pytest.raises(SaleNotFoundError):
        svc.obter_venda(12345)
