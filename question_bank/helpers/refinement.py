"""
Search refinement dialogue.

The dialogue keeps no state of its own: the caller owns the transcript (an
immutable tuple of Turn values) and sends all of it on every round. The first
turn always restates the original topic ("Tópico inicial: ...") so the model
sees the full context each time.

States:
    awaiting_first_turn -> awaiting_user_reply (repeatable) -> complete

The dialogue is complete as soon as an assistant turn carries the
REFINAMENTO_COMPLETO: marker followed by labelled facet lines.
"""
import re
import unicodedata
from dataclasses import dataclass, field, fields, replace
from typing import Optional

from .study_prompts import COMPLETION_MARKER, study_prompt_manager

AWAITING_FIRST_TURN = 'awaiting_first_turn'
AWAITING_USER_REPLY = 'awaiting_user_reply'
COMPLETE = 'complete'

ANY_SENTINEL = 'qualquer'
TOPIC_PREFIX = 'Tópico inicial:'

USER = 'user'
ASSISTANT = 'assistant'
ROLES = (USER, ASSISTANT)

BULLET_CHARS = '-•*–'


def normalize_label(text):
    # Lowercase and strip accents so "Instituição" matches "instituicao"
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold().strip()


def clean_facet_value(raw):
    if raw is None:
        return None
    value = str(raw).strip().strip('[]"\'“”').strip()
    if not value or normalize_label(value) == ANY_SENTINEL:
        return None
    return value


@dataclass(frozen=True)
class Facet:
    key: str
    label: str
    aspect: str
    keywords: tuple


FACETS = (
    Facet('board', 'Banca', 'Banca organizadora (CESGRANRIO, FCC, CESPE, FGV, Fundação CEPERJ)', ('banca',)),
    Facet('institution', 'Instituição', 'Instituição (BNDES, ANM, Petrobras, Banco do Brasil)', ('instituicao', 'orgao')),
    Facet('role', 'Cargo', 'Cargo (Cientista de Dados, Analista, Técnico, Auditor)', ('cargo',)),
    Facet('period', 'Período', 'Período (2024, 2022, últimos 5 anos)', ('periodo', 'data', 'ano')),
    Facet('subject', 'Disciplina', 'Disciplina (Português, Matemática, Direito, Raciocínio Lógico)', ('disciplina', 'materia')),
)

# Summary labels accepted when parsing a completed turn
LABEL_TO_KEY = {normalize_label(f.label): f.key for f in FACETS}
LABEL_TO_KEY[normalize_label('Tópico')] = 'topic'


@dataclass(frozen=True)
class RefinedFacets:
    board: Optional[str] = None
    institution: Optional[str] = None
    role: Optional[str] = None
    period: Optional[str] = None
    subject: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(**{f.name: clean_facet_value(data.get(f.name)) for f in fields(cls)})

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get(self, key):
        return getattr(self, key)

    def is_empty(self):
        return all(value is None for value in self.as_dict().values())

    def merged_with(self, fallback):
        # Own values win; unset ones are taken from `fallback`
        return replace(self, **{
            key: fallback.get(key) for key, value in self.as_dict().items()
            if value is None and fallback.get(key) is not None
        })

    def as_query_suffix(self):
        parts = [f"{facet.label}: {self.get(facet.key)}" for facet in FACETS if self.get(facet.key)]
        return ''.join(f" | {part}" for part in parts)

    def search_terms(self):
        # Facet values usable as extra full-text terms; the period only
        # contributes when it names concrete years
        terms = [self.get(key) for key in ('board', 'institution', 'role', 'subject') if self.get(key)]
        if self.period:
            terms.extend(re.findall(r'\b(?:19|20)\d{2}\b', self.period))
        return terms


def annotate_query(query, facets=None):
    query = query.strip()
    if facets is None or facets.is_empty():
        return query
    return f"{query}{facets.as_query_suffix()}"


@dataclass(frozen=True)
class Turn:
    role: str
    content: str

    def as_message(self):
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class RefinementTurn:
    text: str
    state: str
    facets: Optional[RefinedFacets] = None
    topic: Optional[str] = None
    asked: tuple = field(default=())

    @property
    def is_complete(self):
        return self.state == COMPLETE


class TranscriptError(ValueError):
    pass


def restatement(topic):
    return Turn(USER, f"{TOPIC_PREFIX} {topic.strip()}")


def build_transcript(messages, topic=None):
    # Turn raw {role, content} dicts into an immutable transcript, prepending
    # the topic restatement when the caller supplied the topic separately
    turns = []
    for index, message in enumerate(messages or []):
        if not isinstance(message, dict):
            raise TranscriptError(f"Mensagem {index} inválida")
        role = message.get('role')
        content = message.get('content')
        if role not in ROLES:
            raise TranscriptError(f"Mensagem {index}: papel '{role}' inválido")
        if not isinstance(content, str) or not content.strip():
            raise TranscriptError(f"Mensagem {index}: conteúdo vazio")
        turns.append(Turn(role, content.strip()))

    if topic and topic.strip():
        if not turns or topic_from_transcript(turns) is None:
            turns.insert(0, restatement(topic))

    if not turns:
        raise TranscriptError("Messages array é obrigatória")
    return tuple(turns)


def require_user_turn(transcript):
    # The next assistant turn always answers a user turn
    if not transcript or transcript[-1].role != USER:
        raise TranscriptError("A última mensagem deve ser do usuário")


def topic_from_transcript(transcript):
    if not transcript:
        return None
    first = transcript[0]
    if first.role == USER and first.content.startswith(TOPIC_PREFIX):
        return first.content[len(TOPIC_PREFIX):].strip() or None
    return None


def dialogue_state(transcript):
    assistant_turns = [t for t in transcript if t.role == ASSISTANT]
    if any(is_complete(t.content) for t in assistant_turns):
        return COMPLETE
    if not assistant_turns:
        return AWAITING_FIRST_TURN
    return AWAITING_USER_REPLY


def is_complete(text):
    return bool(text) and COMPLETION_MARKER in text


def parse_completion(text):
    """
    Parse a completed assistant turn.

    Returns (topic, RefinedFacets, stated) or None when the marker is absent.
    Each labelled line after the marker is split on its first colon; values
    equal to "qualquer" and labels that never appear stay unset. `stated` holds
    the facet keys whose line was present, "qualquer" included.
    """
    if not is_complete(text):
        return None

    summary = text.split(COMPLETION_MARKER, 1)[1]
    values = {}
    for line in summary.splitlines():
        line = line.strip().lstrip(BULLET_CHARS).strip()
        label, sep, value = line.partition(':')
        if not sep:
            continue
        key = LABEL_TO_KEY.get(normalize_label(label).strip('*'))
        if key and key not in values:
            values[key] = clean_facet_value(value)

    topic = values.pop('topic', None)
    return topic, RefinedFacets.from_dict(values), frozenset(values)


def summary_text(topic, facets):
    lines = [COMPLETION_MARKER, f"- Tópico: {topic or ANY_SENTINEL}"]
    for facet in FACETS:
        lines.append(f"- {facet.label}: {facets.get(facet.key) or ANY_SENTINEL}")
    return "\n".join(lines)


# Known values recognised directly in the topic text. Patterns run on the
# accent-stripped, lowercased topic; the second element is the canonical value,
# a callable applied to the matched text, or None to keep the user's wording.
_BOARDS = (
    (r'cesgranrio', 'CESGRANRIO'),
    (r'fcc|fundacao carlos chagas', 'FCC'),
    (r'cebraspe', 'Cebraspe'),
    (r'cespe', 'CESPE'),
    (r'fgv|fundacao getulio vargas', 'FGV'),
    (r'(?:fundacao )?ceperj', 'Fundação CEPERJ'),
    (r'vunesp', 'VUNESP'),
    (r'ibfc', 'IBFC'),
    (r'quadrix', 'Quadrix'),
    (r'iades', 'IADES'),
    (r'aocp', 'AOCP'),
    (r'consulplan', 'Consulplan'),
    (r'idecan', 'IDECAN'),
    (r'fundatec', 'FUNDATEC'),
    (r'esaf', 'ESAF'),
)

_INSTITUTIONS = (
    (r'bndes', 'BNDES'),
    (r'anm', 'ANM'),
    (r'petrobras', 'Petrobras'),
    (r'banco do brasil|\bbb\b', 'Banco do Brasil'),
    (r'caixa economica(?: federal)?|cef', 'Caixa'),
    (r'banco central|bacen', 'Banco Central'),
    (r'receita federal', 'Receita Federal'),
    (r'inss', 'INSS'),
    (r'ibge', 'IBGE'),
    (r'tcu', 'TCU'),
    (r'cgu', 'CGU'),
    (r'stf', 'STF'),
    (r'stj', 'STJ'),
    (r'policia federal', 'Polícia Federal'),
    (r'prf|policia rodoviaria federal', 'PRF'),
    (r'(?:trf|trt|tre|tj)(?:-?[a-z]{2}|-?\d+)?', str.upper),  # tribunal acronyms
    (r'correios', 'Correios'),
    (r'senado(?: federal)?', 'Senado Federal'),
    (r'camara dos deputados', 'Câmara dos Deputados'),
    (r'anp', 'ANP'),
    (r'aneel', 'ANEEL'),
)

_ROLES = (
    (r'cientista de dados', 'Cientista de Dados'),
    (r'analista(?: [a-z]+)?', None),
    (r'tecnico(?: [a-z]+)?', None),
    (r'auditor(?: fiscal)?', None),
    (r'escriturario', 'Escriturário'),
    (r'escrivao', 'Escrivão'),
    (r'delegado', 'Delegado'),
    (r'perito', 'Perito'),
    (r'procurador', 'Procurador'),
    (r'engenheiro(?: [a-z]+)?', None),
    (r'professor', 'Professor'),
)

_SUBJECTS = (
    (r'portugues|lingua portuguesa', 'Português'),
    (r'matematica(?: financeira)?', None),
    (r'raciocinio logico', 'Raciocínio Lógico'),
    (r'direito(?: (?:administrativo|constitucional|penal|civil|tributario|processual (?:civil|penal)|do trabalho|empresarial|ambiental))?', None),
    (r'informatica', 'Informática'),
    (r'contabilidade(?: [a-z]+)?', None),
    (r'economia', 'Economia'),
    (r'estatistica', 'Estatística'),
    (r'administracao publica', 'Administração Pública'),
    (r'ingles', 'Inglês'),
    (r'arquivologia', 'Arquivologia'),
)

_YEAR = r'(?:19|20)\d{2}'
_RELATIVE_PERIOD = re.compile(r'\bultimos? \d+ anos?\b')
_CUED_YEAR = re.compile(rf'\b(?:provas?|concursos?|edital|editais|anos?)(?: d[aeo]s?)? ({_YEAR})\b')
_BARE_YEAR = re.compile(rf'(?<![\w/.\-])({_YEAR})\b')
# "CF de 1988", "Lei 8.666, de 21 de junho de 1993": the year dates a document
_DOCUMENT_DATE = re.compile(r'\bd[aeo]\s+$')

# Words that end a role/subject match ("analista de dados sobre ...")
_STOP_TAIL = {'sobre', 'de', 'da', 'do', 'das', 'dos', 'para', 'em', 'e', 'na', 'no', 'com'}


def _match_known(patterns, normalized, original):
    for pattern, canonical in patterns:
        match = re.search(rf'\b(?:{pattern})\b', normalized)
        if not match:
            continue
        if callable(canonical):
            return canonical(original[match.start():match.end()])
        if canonical:
            return canonical
        words = original[match.start():match.end()].split()
        while len(words) > 1 and normalize_label(words[-1]) in _STOP_TAIL:
            words.pop()
        value = ' '.join(words)
        return value if value.isupper() else value[:1].upper() + value[1:]
    return None


def _period_span(normalized):
    # Relative periods and years cued by prova/concurso/edital/ano count;
    # other years only when they stand alone, not inside "14.133/2021"
    match = _RELATIVE_PERIOD.search(normalized)
    if match:
        return match.span()
    match = _CUED_YEAR.search(normalized)
    if match:
        return match.span(1)
    for match in _BARE_YEAR.finditer(normalized):
        if not _DOCUMENT_DATE.search(normalized[:match.start(1)]):
            return match.span(1)
    return None


def detect_facets(topic):
    """Facets that are already stated in the free-text topic."""
    if not topic:
        return RefinedFacets()
    # NFKD keeps one character per letter for Portuguese text, so offsets in
    # the normalized string line up with the original
    normalized = normalize_label(topic)
    original = topic.strip()
    if len(normalized) != len(original):
        original = normalized

    period = None
    span = _period_span(normalized)
    if span:
        period = original[span[0]:span[1]]

    return RefinedFacets(
        board=_match_known(_BOARDS, normalized, original),
        institution=_match_known(_INSTITUTIONS, normalized, original),
        role=_match_known(_ROLES, normalized, original),
        period=period,
        subject=_match_known(_SUBJECTS, normalized, original),
    )


def missing_facets(known):
    return [facet for facet in FACETS if known.get(facet.key) is None]


def drop_known_facet_bullets(text, known):
    # Remove bullet lines that ask about a facet the topic already states
    known_keywords = [
        keyword for facet in FACETS if known.get(facet.key) is not None
        for keyword in facet.keywords
    ]
    if not known_keywords:
        return text

    kept = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and stripped[0] in BULLET_CHARS:
            body = normalize_label(stripped.lstrip(BULLET_CHARS))
            if any(body.startswith(keyword) for keyword in known_keywords):
                continue
        kept.append(line)
    return "\n".join(kept)


def next_turn(transcript, client, prompts=study_prompt_manager):
    """
    Produce the next assistant turn for a caller-owned transcript.

    The transcript must end with a user turn. On the first round only the
    facets missing from the topic are asked about; when the topic already
    states all of them the dialogue completes without calling the model.
    """
    require_user_turn(transcript)

    topic = topic_from_transcript(transcript)
    known = detect_facets(topic)
    missing = missing_facets(known)
    first_round = dialogue_state(transcript) == AWAITING_FIRST_TURN

    if first_round and not missing:
        return RefinementTurn(summary_text(topic, known), COMPLETE, known, topic)

    messages = prompts.get_prompt_for_task('refinement', {
        'messages': [turn.as_message() for turn in transcript],
        'missing_aspects': [facet.aspect for facet in missing],
        'known_aspects': [
            f"{facet.label}: {known.get(facet.key)}" for facet in FACETS if known.get(facet.key)
        ],
    })
    text = client.complete(messages)

    parsed = parse_completion(text)
    if parsed is not None:
        parsed_topic, facets, stated = parsed
        # topic values only fill lines the summary left out; "qualquer" stays unset
        fallback = RefinedFacets(**{
            key: value for key, value in known.as_dict().items() if key not in stated
        })
        return RefinementTurn(text, COMPLETE, facets.merged_with(fallback), parsed_topic or topic)

    if first_round:
        text = drop_known_facet_bullets(text, known)
    return RefinementTurn(
        text,
        AWAITING_USER_REPLY,
        topic=topic,
        asked=tuple(facet.key for facet in missing) if first_round else (),
    )


def skip_refinement(topic=None):
    # The user declined further refinement: complete with nothing set
    return RefinementTurn('', COMPLETE, RefinedFacets(), topic)
