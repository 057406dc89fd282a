import os
import time
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("RUNNING_IN_DOCKER", "1")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

from app.main import app  # noqa: E402
from app.database.db_connection import Base, get_db  # noqa: E402
from app.database.init_db import importar_models  # noqa: E402
from app.api.catalogo.contracts.produto_contract import IProdutoContract, Produto  # noqa: E402
from app.api.catalogo.models.model_produto import ProdutoModel  # noqa: E402
from app.api.mesas.contracts.notifier_contract import INotifierContract  # noqa: E402
from app.api.mesas.contracts.store_contract import EntityKind, IStoreContract  # noqa: E402
from app.api.mesas.core.exceptions import StoreConflictError, StoreError  # noqa: E402
from app.api.mesas.models.model_mesa import StatusMesa  # noqa: E402


# ---------- Fakes ----------
class FakeStore(IStoreContract):
    """Store em memória com injeção de falhas por operação/tipo."""

    def __init__(self):
        self.tabelas = {kind: {} for kind in EntityKind}
        self._ultimo_id = {kind: 0 for kind in EntityKind}
        self.escritas = []
        self._falhas = {}

    def falhar(self, op: str, kind: EntityKind, apos: int = 0, erro: BaseException = None):
        """Faz a operação falhar depois de ``apos`` chamadas bem-sucedidas."""
        self._falhas[(op, EntityKind(kind))] = [apos, erro or StoreError(f"falha injetada em {op} {kind.value}")]

    def limpar_falhas(self):
        self._falhas.clear()

    def _checar(self, op: str, kind: EntityKind):
        regra = self._falhas.get((op, kind))
        if regra is None:
            return
        if regra[0] > 0:
            regra[0] -= 1
            return
        raise regra[1]

    def insert(self, kind, record):
        kind = EntityKind(kind)
        self._checar("insert", kind)
        self._ultimo_id[kind] += 1
        novo = dict(record, id=self._ultimo_id[kind])
        self.tabelas[kind][novo["id"]] = novo
        self.escritas.append(("insert", kind, novo["id"]))
        return dict(novo)

    def update(self, kind, record_id, patch, *, expected=None):
        kind = EntityKind(kind)
        self._checar("update", kind)
        if record_id not in self.tabelas[kind]:
            raise StoreError(f"Registro {kind.value} id={record_id} não encontrado")
        atual = self.tabelas[kind][record_id]
        if any(atual.get(k) != v for k, v in (expected or {}).items()):
            raise StoreConflictError(f"Registro {kind.value} id={record_id} foi alterado")
        atual.update(patch)
        self.escritas.append(("update", kind, record_id))
        return dict(self.tabelas[kind][record_id])

    def delete(self, kind, record_id):
        kind = EntityKind(kind)
        self._checar("delete", kind)
        if self.tabelas[kind].pop(record_id, None) is not None:
            self.escritas.append(("delete", kind, record_id))

    def query(self, kind, filtro=None, *, for_update=False):
        kind = EntityKind(kind)
        filtro = filtro or {}
        return [
            dict(r)
            for _, r in sorted(self.tabelas[kind].items())
            if all(r.get(k) == v for k, v in filtro.items())
        ]


class FakeStoreLento(FakeStore):
    """Consulta com atraso, para abrir a janela entre checagem e escrita."""

    def __init__(self, atraso: float = 0.05):
        super().__init__()
        self.atraso = atraso

    def query(self, kind, filtro=None, *, for_update=False):
        time.sleep(self.atraso)
        return super().query(kind, filtro, for_update=for_update)


class FakeCatalogo(IProdutoContract):
    def __init__(self, *produtos: Produto):
        self.produtos = {p.codigo: p for p in produtos}

    def obter_produto_por_codigo(self, codigo):
        return self.produtos.get(codigo)

    def listar_produtos(self, apenas_ativos=True):
        return [p for p in self.produtos.values() if p.ativo or not apenas_ativos]


class FakeNotifier(INotifierContract):
    def __init__(self, falhar: bool = False):
        self.enviadas = []
        self.falhar = falhar

    def notify(self, kind, message):
        self.enviadas.append((kind.value, message))
        if self.falhar:
            raise RuntimeError("notificador fora do ar")


REFRI = Produto(codigo="A", nome="Refrigerante", preco_unitario=Decimal("10.00"))
SUCO = Produto(codigo="B", nome="Suco", preco_unitario=Decimal("7.50"))
BUFFET = Produto(codigo="P", nome="Buffet por quilo", pesavel=True, preco_por_grama=Decimal("0.0599"))
SEM_PRECO = Produto(codigo="X", nome="Prato do dia")


# ---------- Fixtures de domínio ----------
@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def store_lento() -> FakeStoreLento:
    return FakeStoreLento()


@pytest.fixture()
def catalogo() -> FakeCatalogo:
    return FakeCatalogo(REFRI, SUCO, BUFFET, SEM_PRECO)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def notifier_quebrado() -> FakeNotifier:
    return FakeNotifier(falhar=True)


@pytest.fixture()
def nova_mesa(store):
    """Grava uma mesa diretamente no store fake."""
    def _criar(numero=1, capacidade=4, status=StatusMesa.LIVRE, ativa=True, venda_atual_id=None):
        return store.insert(
            EntityKind.MESA,
            {
                "numero": numero,
                "nome": f"Mesa {numero}",
                "capacidade": capacidade,
                "status": status,
                "localizacao": None,
                "ativa": ativa,
                "venda_atual_id": venda_atual_id,
            },
        )
    return _criar


# ---------- Banco SQLite em memória ----------
@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    importar_models()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def produtos_db(session_factory):
    with session_factory() as session:
        session.add_all([
            ProdutoModel(codigo="A", nome="Refrigerante", preco_unitario=Decimal("10.00")),
            ProdutoModel(codigo="B", nome="Suco", preco_unitario=Decimal("7.50")),
            ProdutoModel(codigo="P", nome="Buffet por quilo", pesavel=True, preco_por_grama=Decimal("0.0599")),
            ProdutoModel(codigo="Z", nome="Sobremesa antiga", preco_unitario=Decimal("5.00"), ativo=False),
        ])
        session.commit()


@pytest.fixture()
def client(session_factory) -> Generator[TestClient, None, None]:
    def override_get_db():
        db = session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
