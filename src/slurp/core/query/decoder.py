"""Decoder for the compact query strings used by the search UI.

A query is a list of clauses separated by semicolons. Each clause is
``{field},{precision},{term}[,{operator}]``:

    title,contains,fisker,krabber,OR;creator,contains,tor,NOT;any,exact,laks,AND

- Semicolons are stripped from search terms, so splitting on ``;`` is safe.
- Commas are NOT escaped, so a term may span several comma separated tokens.
- Advanced search always adds a trailing operator, simple search does not.
- Material type, language and date selected in advanced search are sent as
  clauses whose field starts with ``facet_``.

The trailing operator of a clause joins it to the *next* clause. The decoder
moves each operator one clause to the right, so that ``op`` on a decoded
clause tells how it is joined to the clause before it.
"""

from dataclasses import replace

from slurp.config import BOOLEAN_OPERATORS, FACET_FIELD_PREFIX
from slurp.models.event import DecodedQuery, FacetClause, QueryClause


def _parse_segment(segment: str) -> QueryClause:
    """Parse one ``field,precision,term[,op]`` segment. Never raises."""
    tokens = segment.split(",")
    op: str | None = None
    if tokens[-1] in BOOLEAN_OPERATORS:
        op = tokens[-1]
        term_tokens = tokens[2:-1]
    else:
        term_tokens = tokens[2:]

    return QueryClause(
        field=tokens[0],
        precision=tokens[1] if len(tokens) > 1 else None,
        term=",".join(term_tokens),
        op=op,
    )


def _shift_operators(clauses: list[QueryClause]) -> list[QueryClause]:
    """Move each trailing operator onto the following clause."""
    if not clauses:
        return clauses
    ops = [None] + [c.op for c in clauses[:-1]]
    return [replace(c, op=op) for c, op in zip(clauses, ops, strict=True)]


def decode_query(raw: str | None, *, facet_prefix: str = FACET_FIELD_PREFIX) -> DecodedQuery:
    """Decode a raw query string into boolean clauses and facet clauses.

    Args:
        raw: Query string as found in the search object. None is treated as "".
        facet_prefix: Fields starting with this prefix are routed to query_facets.

    Returns:
        DecodedQuery with operators shifted so the first clause has op None.
    """
    query: list[QueryClause] = []
    query_facets: list[FacetClause] = []

    for segment in (raw or "").split(";"):
        clause = _parse_segment(segment)
        if facet_prefix and clause.field.startswith(facet_prefix):
            query_facets.append(
                FacetClause(field=clause.field, precision=clause.precision, term=clause.term)
            )
        else:
            query.append(clause)

    return DecodedQuery(query=tuple(_shift_operators(query)), query_facets=tuple(query_facets))
