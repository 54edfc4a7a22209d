"""Category suggestion for statement descriptions.

Scores a description against a table of category definitions using known
merchant names, keywords and an edit-distance fuzzy match for typos.

``CategoryMatcher`` holds its definition table; construct one per process
and pass it to whatever needs suggestions.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

MERCHANT_SCORE = 0.95
KEYWORD_SCORE = 0.7
FUZZY_WEIGHT = 0.5
FUZZY_THRESHOLD = 0.75
MIN_FUZZY_WORD_LENGTH = 4
MAX_ALTERNATIVES = 3


@dataclass(frozen=True)
class CategoryDefinition:
    """Matching rules for one category."""

    id: str
    name: str
    keywords: tuple[str, ...]
    merchants: tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryMatch:
    """A scored category candidate."""

    category_id: str
    category_name: str
    confidence: float


@dataclass(frozen=True)
class CategorizeResult:
    """Best candidate plus up to three runners-up."""

    category_id: str
    category_name: str
    confidence: float
    alternatives: list[CategoryMatch] = field(default_factory=list)


DEFAULT_CATEGORY_DEFINITIONS: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        id="salary",
        name="Salário",
        keywords=(
            "salario", "salário", "salary", "payroll", "folha", "vencimentos",
            "remuneracao", "remuneração", "pagto salario", "13 salario",
        ),
    ),
    CategoryDefinition(
        id="freelance",
        name="Freelance",
        keywords=(
            "freelance", "freela", "honorarios", "honorários", "consultoria",
            "servico prestado", "serviço prestado", "autonomo", "autônomo",
        ),
    ),
    CategoryDefinition(
        id="investment",
        name="Investimentos",
        keywords=(
            "rendimento", "dividendo", "dividend", "yield", "aplicacao",
            "aplicação", "resgate", "tesouro", "cdb",
        ),
    ),
    CategoryDefinition(
        id="food",
        name="Alimentação",
        keywords=(
            "padaria", "supermercado", "mercado", "açougue", "pão", "restaurante",
            "pizza", "hamburger", "lanchonete", "café", "bar", "boteco",
            "churrascaria", "alimento", "comida", "bebida",
        ),
        merchants=(
            "pão de açúcar", "carrefour", "extra", "walmart", "dia", "prezunic",
            "mcdonald", "burger king", "subway", "starbucks", "ifood", "rappi",
        ),
    ),
    CategoryDefinition(
        id="health",
        name="Saúde",
        keywords=(
            "farmácia", "farmacia", "pharmacy", "medicamento", "remédio", "droga",
            "drogaria", "médico", "medico", "consulta", "hospital", "clinica",
            "clínica", "dentista", "oftalmologista", "plano de saude",
        ),
        merchants=("drogasil", "drogaria sao paulo", "farmais", "drogaria paulista", "pague menos"),
    ),
    CategoryDefinition(
        id="education",
        name="Educação",
        keywords=(
            "escola", "faculdade", "universidade", "cursos", "curso", "livro",
            "livraria", "educação", "educacao", "aula", "professor", "mensalidade",
            "enem", "vestibular", "material escolar",
        ),
        merchants=("biblioteca", "saraiva", "estante magica", "udemy", "coursera", "alura"),
    ),
    CategoryDefinition(
        id="transport",
        name="Transporte",
        keywords=(
            "uber", "taxi", "táxi", "ônibus", "onibus", "metro", "combustível",
            "combustivel", "gasolina", "diesel", "alcool", "álcool",
            "estacionamento", "metrô", "passagem", "transporte",
        ),
        merchants=("shell", "br", "esso", "chevron", "ipiranga", "99taxi", "beat", "posto"),
    ),
    CategoryDefinition(
        id="bills",
        name="Contas",
        keywords=(
            "água", "agua", "luz", "eletricidade", "eletrica", "energia", "telefone",
            "internet", "gas", "gás", "conta", "fatura", "utilidade",
            # Card statements
            "cartao", "cartão", "juros", "taxa", "anuidade", "pagamento cartao",
            "visa", "mastercard",
        ),
        merchants=("cemig", "copasa", "companhia de gás", "vivo", "claro", "oi", "tim", "embratel", "net"),
    ),
    CategoryDefinition(
        id="entertainment",
        name="Lazer",
        keywords=(
            "netflix", "spotify", "cinema", "filme", "teatro", "show", "concerto",
            "musica", "música", "jogos", "jogo", "game", "streaming", "disney",
            "hbo", "amazon prime", "lazer", "diversao",
        ),
        merchants=("ingresso", "sympla", "cinemark", "cinesystem", "playstation", "xbox", "prime video"),
    ),
    CategoryDefinition(
        id="shopping",
        name="Compras",
        keywords=(
            "roupa", "roupas", "sapato", "calçado", "calcado", "moda", "loja",
            "boutique", "vestuario", "amazon", "mercado livre", "compra", "shop",
            "store", "online",
        ),
        merchants=(
            "renner", "riachuelo", "forum", "zara", "hm", "adidas", "nike", "amazon",
            "mercado livre", "shopee", "shein", "aliexpress",
        ),
    ),
)

DEFAULT_FALLBACK = CategoryMatch(category_id="shopping", category_name="Compras", confidence=0.0)


def levenshtein_distance(first: str, second: str) -> int:
    """Number of single-character edits turning ``first`` into ``second``."""
    if len(first) < len(second):
        first, second = second, first
    previous = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(current[j - 1] + 1, previous[j] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """Edit-distance similarity in [0, 1], case-insensitive."""
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(first.lower(), second.lower()) / longest


class CategoryMatcher:
    """Suggests categories for transaction descriptions."""

    def __init__(
        self,
        definitions: Sequence[CategoryDefinition] = DEFAULT_CATEGORY_DEFINITIONS,
        fallback: CategoryMatch = DEFAULT_FALLBACK,
    ):
        """Initialize the matcher.

        Args:
            definitions: Category rules; ids should be unique
            fallback: Suggestion returned when nothing scores above zero
        """
        self.definitions = tuple(definitions)
        self.fallback = fallback

    def score(self, description: str) -> dict[str, float]:
        """Raw accumulated score per category id, before clamping."""
        text = description.lower().strip()
        words = [word for word in re.split(r"\s+", text) if len(word) >= MIN_FUZZY_WORD_LENGTH]
        scores = {definition.id: 0.0 for definition in self.definitions}

        for definition in self.definitions:
            for merchant in definition.merchants:
                if merchant.lower() in text:
                    scores[definition.id] += MERCHANT_SCORE

            for keyword in definition.keywords:
                if keyword.lower() in text:
                    scores[definition.id] += KEYWORD_SCORE

            for keyword in definition.keywords:
                for word in words:
                    ratio = similarity(word, keyword)
                    if ratio >= FUZZY_THRESHOLD:
                        scores[definition.id] += ratio * FUZZY_WEIGHT

        return scores

    def categorize(self, description: str) -> CategorizeResult:
        """Suggest a category for a description.

        Returns:
            The best-scoring category with up to three alternatives; the
            fallback with confidence 0 when nothing matched
        """
        scores = self.score(description)
        ranked = sorted(
            (
                CategoryMatch(
                    category_id=definition.id,
                    category_name=definition.name,
                    confidence=min(1.0, scores[definition.id]),
                )
                for definition in self.definitions
            ),
            key=lambda match: match.confidence,
            reverse=True,
        )
        matches = [match for match in ranked if match.confidence > 0]

        top = matches[0] if matches else self.fallback
        return CategorizeResult(
            category_id=top.category_id,
            category_name=top.category_name,
            confidence=top.confidence,
            alternatives=matches[1 : 1 + MAX_ALTERNATIVES],
        )

    def get_definition(self, category_id: str) -> Optional[CategoryDefinition]:
        """Look up a definition by id."""
        for definition in self.definitions:
            if definition.id == category_id:
                return definition
        return None
