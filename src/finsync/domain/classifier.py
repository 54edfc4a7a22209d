"""Income/expense classification of statement lines.

Ambiguity resolves to expense: treating an expense as income overstates what
is available to spend, the reverse only understates it.
"""

from decimal import Decimal
from typing import Optional

from finsync.domain.entities import EXPENSE, INCOME

INCOME_KEYWORDS: tuple[str, ...] = (
    # Salary and pay
    "salario", "salário", "salary", "vencimento", "vencimentos", "wages", "folha", "payroll",
    "remuneracao", "remuneração", "salario liquido", "salário líquido", "sal liq", "sal. liq",
    "salario mes", "salário mês", "remuneracao mensal", "remuneração mensal",
    "salario empresa", "salário empresa", "pagto salario", "pagto salário",
    # Bonuses
    "bonus", "bônus", "gratificacao", "gratificação", "premio", "prêmio",
    "13 salario", "13º salario", "13º salário", "decimo terceiro", "décimo terceiro",
    # Transfers and deposits received
    "deposito", "depósito", "transferencia recebida", "transferência recebida",
    "ted recebida", "pix recebido", "doc recebido", "receb ted", "receb pix", "receb doc",
    "cred em conta", "credito em conta", "crédito em conta",
    # Investment returns and rent
    "rendimento", "juros", "interest", "dividendo", "dividend", "lucro", "yield",
    "aluguel recebido", "aluguel", "renda imovel", "renda imóvel", "locacao", "locação",
    # Refunds
    "reembolso", "reembolsado", "devolucao", "devolução", "refund", "estorno",
    # Sales and freelance work
    "venda", "sale", "recebimento", "recebido", "received", "pagto recebido",
    "freelance", "freela", "autonomo", "autônomo", "servico prestado", "serviço prestado",
    "honorarios", "honorários", "consultoria", "projeto", "trabalho autonomo", "trabalho autônomo",
    # Generic
    "entrada", "receita", "income", "credit", "credito", "crédito",
    "deposito em conta", "depósito em conta",
)

EXPENSE_KEYWORDS: tuple[str, ...] = (
    "pagamento", "payment", "pago", "paid",
    "debito", "débito", "debit", "saida", "saída",
    "compra", "purchase", "comprado",
    "despesa", "expense", "gasto",
    "transferencia enviada", "transferência enviada", "ted enviada",
)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def has_income_keyword(text: str) -> bool:
    """Case-insensitive income keyword check."""
    return _contains_any(text.lower(), INCOME_KEYWORDS)


def has_expense_keyword(text: str) -> bool:
    """Case-insensitive expense keyword check."""
    return _contains_any(text.lower(), EXPENSE_KEYWORDS)


def detect_transaction_type(description: str, raw_type: Optional[str] = None) -> str:
    """Classify from text alone.

    Income keywords in the description win, then the explicit type column
    (income before expense keywords), then expense keywords in the
    description. Anything else is an expense.
    """
    if has_income_keyword(description):
        return INCOME

    if raw_type:
        if has_income_keyword(raw_type):
            return INCOME
        if has_expense_keyword(raw_type):
            return EXPENSE

    if has_expense_keyword(description):
        return EXPENSE

    return EXPENSE


def determine_type(
    amount: Decimal, description: Optional[str] = None, raw_type: Optional[str] = None
) -> str:
    """Classify a line from a single signed amount; negative is always expense."""
    if amount < 0:
        return EXPENSE
    return detect_transaction_type(description or "", raw_type)


def classify_credit(amount: Decimal, description: str, raw_type: Optional[str] = None) -> str:
    """Classify a positive value found in a credit column.

    Credit means income unless the description carries an expense keyword.
    """
    detected = determine_type(amount, description, raw_type)
    if detected == EXPENSE and not has_expense_keyword(description):
        return INCOME
    return detected


def classify_debit(amount: Decimal, description: str, raw_type: Optional[str] = None) -> str:
    """Classify a positive value found in a debit column.

    Debit means expense unless the text independently looks like income
    (some banks book salary through a debit ledger column).
    """
    if determine_type(amount, description, raw_type) == INCOME:
        return INCOME
    return EXPENSE
