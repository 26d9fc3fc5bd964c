"""Channel adapters.

Thin translation layers between a hosting transport and the shared
SearchValidator:

  frontend.py — catalog search route; BLOCK → redirect + flash message
  rest.py     — REST search route;    BLOCK → HTTP 400
  graphql.py  — GraphQL products;     BLOCK → field-level error
"""
