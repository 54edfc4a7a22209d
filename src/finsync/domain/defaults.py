"""Initial data for a fresh local store."""

from finsync.domain.entities import EXPENSE, INCOME, Category, FinanceSnapshot, Settings

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="salary", name="Salário", type=INCOME, icon="💼"),
    Category(id="freelance", name="Freelance", type=INCOME, icon="💻"),
    Category(id="investment", name="Investimentos", type=INCOME, icon="📈"),
    Category(id="other-income", name="Outros (Entrada)", type=INCOME, icon="💰"),
    Category(id="tithe", name="Dízimo", type=EXPENSE, icon="⛪"),
    Category(id="housing", name="Moradia", type=EXPENSE, icon="🏠"),
    Category(id="food", name="Alimentação", type=EXPENSE, icon="🍽️"),
    Category(id="transport", name="Transporte", type=EXPENSE, icon="🚗"),
    Category(id="health", name="Saúde", type=EXPENSE, icon="🏥"),
    Category(id="education", name="Educação", type=EXPENSE, icon="📚"),
    Category(id="entertainment", name="Lazer", type=EXPENSE, icon="🎬"),
    Category(id="shopping", name="Compras", type=EXPENSE, icon="🛍️"),
    Category(id="bills", name="Contas", type=EXPENSE, icon="📄"),
    Category(id="consortium", name="Consórcio", type=EXPENSE, icon="🏦"),
    Category(id="other-expense", name="Outros (Saída)", type=EXPENSE, icon="💸"),
)


def default_snapshot() -> FinanceSnapshot:
    """Snapshot of a store that has never been written."""
    return FinanceSnapshot(
        transactions=[],
        recurrences=[],
        categories=list(DEFAULT_CATEGORIES),
        settings=Settings(),
    )
