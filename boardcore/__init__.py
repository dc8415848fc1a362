"""Core of a bulletin board: cached data access, repositories and helpers.

Typical wiring:

    from boardcore.context import AppState
    from boardcore.core.config import AppConfig

    state = AppState()
    await state.initialize(AppConfig.from_env())
    ctx = state.context_for(member_id=7)
"""

__version__ = "0.1.0"
