"""Session/view controller: the state machine that binds the UI to the stores.

The controller owns a :class:`SessionContext` (current user, view state,
inputs, result, error text, theme). It is loaded from the persisted store on
construction and cleared on logout. Every user-triggered failure is turned
into error text on the context; none of them propagate to the caller.

States and transitions::

    INPUT --submit--> ANALYZING --ok--> RESULTS
                               --fail--> INPUT (error set)
    INPUT/RESULTS/HISTORY --reset--> INPUT
    any --navigate(AUTH)--> AUTH --login/signup--> INPUT
    any --navigate(HISTORY)--> HISTORY (AUTH when logged out)
    HISTORY --select--> RESULTS
    any --logout--> INPUT

``ERROR`` is declared for completeness but never entered.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from cv_match.clients.llm_client import LLMClient
from cv_match.config import AppConfig
from cv_match.errors import (
    AccountExistsError,
    AnalysisFailure,
    AuthFailure,
    InvalidTransition,
    ValidationFailure,
)
from cv_match.export.markdown_report import to_markdown
from cv_match.logging.cost_calculator import calculate_cost
from cv_match.logging.models import UsageLog
from cv_match.logging.usage_store import UsageStore
from cv_match.models.account import HistoryItem, User
from cv_match.models.analysis import AnalysisResult
from cv_match.pipeline.match_analyst import MatchAnalyst
from cv_match.storage.account_store import AccountStore
from cv_match.storage.history_store import HistoryStore
from cv_match.storage.kv_store import KeyValueStore
from cv_match.storage.preferences import PreferenceStore

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = (
    "Analysis failed. Please try again. "
    "Ensure both texts are long enough for a meaningful analysis."
)
HISTORY_SAVE_ERROR_MESSAGE = "Analysis complete, but it could not be saved to your history."
MISSING_INPUT_MESSAGE = "Please paste both your CV and the job description."
MISSING_FIELDS_MESSAGE = "Please fill in all fields."
ACCOUNT_NOT_FOUND_MESSAGE = "Account not found. Please sign up first."
ACCOUNT_EXISTS_MESSAGE = "Account already exists. Please log in."


class AppState(str, Enum):
    INPUT = "INPUT"
    ANALYZING = "ANALYZING"
    RESULTS = "RESULTS"
    ERROR = "ERROR"
    AUTH = "AUTH"
    HISTORY = "HISTORY"


@dataclass
class SessionContext:
    state: AppState = AppState.INPUT
    user: User | None = None
    cv_text: str = ""
    jd_text: str = ""
    result: AnalysisResult | None = None
    error: str | None = None
    auth_error: str | None = None
    theme: str = "light"

    @property
    def has_inputs(self) -> bool:
        return bool(self.cv_text.strip()) and bool(self.jd_text.strip())


def _new_id() -> str:
    return uuid.uuid4().hex


class SessionController:
    def __init__(
        self,
        analyst: MatchAnalyst,
        accounts: AccountStore,
        history: HistoryStore,
        preferences: PreferenceStore,
        *,
        usage_store: UsageStore | None = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.analyst = analyst
        self.accounts = accounts
        self.history = history
        self.preferences = preferences
        self.usage_store = usage_store
        self._clock = clock
        self._id_factory = id_factory
        self._in_flight = False
        self.context = SessionContext(
            user=accounts.get_current_user(),
            theme=preferences.get_theme(),
        )

    @property
    def state(self) -> AppState:
        return self.context.state

    @property
    def user(self) -> User | None:
        return self.context.user

    @property
    def is_busy(self) -> bool:
        """True while an analysis is outstanding; input should be disabled."""
        return self._in_flight

    @property
    def can_submit(self) -> bool:
        return self.context.has_inputs and not self._in_flight

    def set_inputs(self, cv_text: str | None = None, jd_text: str | None = None) -> None:
        if cv_text is not None:
            self.context.cv_text = cv_text
        if jd_text is not None:
            self.context.jd_text = jd_text

    # --- analysis ---

    async def submit(self, cv_text: str | None = None, jd_text: str | None = None) -> AppState:
        """Run an analysis of the current inputs and return the resulting state."""
        ctx = self.context
        if self._in_flight:
            logger.debug("Analysis already in flight, ignoring submit")
            return ctx.state

        self.set_inputs(cv_text, jd_text)
        if not ctx.has_inputs:
            ctx.error = MISSING_INPUT_MESSAGE
            ctx.state = AppState.INPUT
            return ctx.state

        # Captured before awaiting so a logout mid-flight does not redirect the save.
        cv, jd, user = ctx.cv_text, ctx.jd_text, ctx.user
        ctx.state = AppState.ANALYZING
        ctx.error = None
        self._in_flight = True
        start = time.monotonic()
        try:
            result = await self.analyst.analyze(cv, jd)
        except ValidationFailure as e:
            self._fail(MISSING_INPUT_MESSAGE, start, user, e.message)
            return ctx.state
        except AnalysisFailure as e:
            logger.warning("Analysis failed: %s", e.message)
            self._fail(ANALYSIS_ERROR_MESSAGE, start, user, e.message)
            return ctx.state
        except Exception as e:
            logger.exception("Unexpected error during analysis")
            self._fail(ANALYSIS_ERROR_MESSAGE, start, user, str(e))
            return ctx.state
        finally:
            self._in_flight = False

        ctx.result = result
        if user is not None:
            try:
                item = HistoryItem(
                    id=self._id_factory(),
                    timestamp=int(self._clock() * 1000),
                    cv_text=cv,
                    jd_text=jd,
                    result=result,
                )
                self.history.save_analysis(user.email, item)
            except Exception:
                logger.exception("Failed to save analysis for %s", user.email)
                ctx.error = HISTORY_SAVE_ERROR_MESSAGE
        self._record_usage(start, user, result=result)
        ctx.state = AppState.RESULTS
        return ctx.state

    def _fail(self, message: str, start: float, user: User | None, detail: str) -> None:
        self._record_usage(start, user, error=detail)
        self.context.error = message
        self.context.state = AppState.INPUT

    def _record_usage(
        self,
        start: float,
        user: User | None,
        *,
        result: AnalysisResult | None = None,
        error: str | None = None,
    ) -> None:
        if self.usage_store is None:
            return
        try:
            tokens = self.analyst.token_summary()
            log = UsageLog(
                user_email=user.email if user else None,
                model=self.analyst.model,
                overall_score=result.overall_score if result else None,
                elapsed_seconds=time.monotonic() - start,
                total_input_tokens=tokens["input"],
                total_output_tokens=tokens["output"],
                estimated_cost_usd=calculate_cost(tokens["calls"]),
                success=error is None,
                error_message=error,
            )
            self.usage_store.save_log(log)
        except Exception:
            logger.exception("Failed to save usage log")

    # --- navigation ---

    def reset(self) -> AppState:
        """Back to INPUT, dropping the current result and error."""
        if self._in_flight:
            raise InvalidTransition("Cannot reset while an analysis is running")
        self.context.result = None
        self.context.error = None
        self.context.state = AppState.INPUT
        return self.context.state

    def navigate(self, target: AppState) -> AppState:
        ctx = self.context
        target = AppState(target)
        if target in (AppState.ANALYZING, AppState.ERROR):
            raise InvalidTransition(f"Cannot navigate to {target.value}")
        if target is AppState.RESULTS and ctx.result is None:
            raise InvalidTransition("No result to show")
        if target is AppState.HISTORY and ctx.user is None:
            target = AppState.AUTH
        if target is AppState.AUTH:
            ctx.auth_error = None
        ctx.state = target
        return ctx.state

    # --- accounts ---

    def login(self, email: str) -> bool:
        """Log in an existing account. Failures set ``auth_error`` and return False."""
        try:
            if not email.strip():
                raise AuthFailure(MISSING_FIELDS_MESSAGE)
            user = self.accounts.login(email)
            if user is None:
                raise AuthFailure(ACCOUNT_NOT_FOUND_MESSAGE)
        except AuthFailure as e:
            return self._auth_failed(e)
        return self._auth_succeeded(user)

    def signup(self, email: str, name: str) -> bool:
        """Create an account. Failures set ``auth_error`` and return False."""
        try:
            if not email.strip() or not name.strip():
                raise AuthFailure(MISSING_FIELDS_MESSAGE)
            user = self.accounts.register(email, name)
        except AccountExistsError as e:
            return self._auth_failed(AuthFailure(ACCOUNT_EXISTS_MESSAGE, cause=e))
        except AuthFailure as e:
            return self._auth_failed(e)
        return self._auth_succeeded(user)

    def _auth_failed(self, error: AuthFailure) -> bool:
        logger.info("Auth failed: %s", error.message)
        self.context.auth_error = error.message
        self.context.state = AppState.AUTH
        return False

    def _auth_succeeded(self, user: User) -> bool:
        self.context.user = user
        self.context.auth_error = None
        self.context.state = AppState.INPUT
        return True

    def logout(self) -> AppState:
        """Clear the persisted pointer and all working state."""
        self.accounts.logout()
        ctx = self.context
        ctx.user = None
        ctx.result = None
        ctx.error = None
        ctx.auth_error = None
        ctx.cv_text = ""
        ctx.jd_text = ""
        ctx.state = AppState.INPUT
        return ctx.state

    # --- history ---

    def history_items(self) -> list[HistoryItem]:
        if self.context.user is None:
            return []
        return self.history.get_history(self.context.user.email)

    def select_history(self, item_id: str) -> bool:
        """Restore a saved analysis into the working state and show it."""
        ctx = self.context
        if ctx.user is None:
            return False
        item = self.history.get_item(ctx.user.email, item_id)
        if item is None:
            return False
        ctx.cv_text = item.cv_text
        ctx.jd_text = item.jd_text
        ctx.result = item.result
        ctx.error = None
        ctx.state = AppState.RESULTS
        return True

    def delete_history(self, item_id: str, confirm: Callable[[], bool] | None = None) -> bool:
        """Delete a saved analysis after optional confirmation.

        Returns True if an entry was removed.
        """
        ctx = self.context
        if ctx.user is None:
            return False
        if confirm is not None and not confirm():
            return False
        existed = self.history.get_item(ctx.user.email, item_id) is not None
        self.history.delete_analysis(ctx.user.email, item_id)
        return existed

    # --- misc ---

    def toggle_theme(self) -> str:
        self.context.theme = self.preferences.toggle_theme()
        return self.context.theme

    def export_markdown(self) -> str | None:
        if self.context.result is None:
            return None
        return to_markdown(self.context.result)


def build_controller(config: AppConfig, llm: LLMClient | None = None) -> SessionController:
    """Wire stores, client and analyst from config."""
    storage = config.storage
    kv = KeyValueStore(storage.resolved_db_path)
    if llm is None:
        llm = LLMClient(timeout=config.llm.timeout)
    analyst = MatchAnalyst(
        llm,
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
    )
    usage_store = UsageStore(config.usage.resolved_db_path) if config.usage.enabled else None
    return SessionController(
        analyst,
        AccountStore(kv, user_prefix=storage.user_prefix, active_user_key=storage.active_user_key),
        HistoryStore(kv, history_prefix=storage.history_prefix),
        PreferenceStore(kv, theme_key=storage.theme_key, default_theme=storage.default_theme),
        usage_store=usage_store,
    )
