"""
spacelint rules package.

Each module defines one rule class and lists its instance in a module-level
``RULES``. ``engine.registry.discover_rules(["spacelint.rules"])`` imports
every module here and registers what it finds. A rule needs a ``meta``
(``RuleMeta``), a ``requires`` (``Requires``) and a ``visit(ctx)`` that
yields ``Finding`` objects; options come from ``ctx.config[meta.id]``.
"""
