"""
Pipeline orchestrator - runs identification -> research -> comparables ->
draft -> history for the current item.

Runs are started by submit() and update_credentials(). Every trigger bumps a
generation counter; a run compares its token against the counter after each
await and drops its result once a newer trigger exists. Underlying calls are
never cancelled, only ignored.
"""
import logging
import uuid
from enum import Enum
from typing import Callable, Optional

from ..errors import MissingCredentialError, PipelineError
from ..models.credentials import CredentialSet
from ..models.identification import ItemIdentification
from ..models.listing import ComparableItem, ListingDraft
from ..models.market import MarketData
from ..storage.history import DraftHistoryStore
from .collaborators import DrafterFactory, MarketplaceSearch, MarketResearcher
from .extraction import coerce_market_data
from .fallback import FallbackDraftSynthesizer
from .market import complete_market_data


logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    GROUNDING = "grounding"
    RETRIEVING_COMPARABLES = "retrieving_comparables"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    FAILED = "failed"


# Stage names used in error messages that are not pipeline states
SAVING_STAGE = "saving"


class _Superseded(Exception):
    """A newer trigger replaced this run."""


class ListingPipeline:
    """
    Drives one listing draft at a time for the latest identification.

    Collaborator handles are created and owned by the caller. The drafting
    backend is built per run from the current drafting API key; without a
    key, the fallback synthesizer drafts instead.
    """

    def __init__(
        self,
        researcher: MarketResearcher,
        marketplace: MarketplaceSearch,
        history: DraftHistoryStore,
        drafter_factory: Optional[DrafterFactory] = None,
        credentials: Optional[CredentialSet] = None,
        synthesizer: Optional[FallbackDraftSynthesizer] = None,
        keyword_limit: int = 5,
        on_state_change: Optional[Callable[[PipelineState], None]] = None,
        on_draft: Optional[Callable[[ListingDraft], None]] = None,
        on_error: Optional[Callable[[PipelineError], None]] = None,
    ):
        self.researcher = researcher
        self.marketplace = marketplace
        self.history = history
        self.drafter_factory = drafter_factory
        self.credentials = credentials or CredentialSet()
        self.synthesizer = synthesizer or FallbackDraftSynthesizer(keyword_limit=keyword_limit)
        self.keyword_limit = keyword_limit
        self.on_state_change = on_state_change
        self.on_draft = on_draft
        self.on_error = on_error

        self.state = PipelineState.IDLE
        self.identification: Optional[ItemIdentification] = None
        self.image_url: Optional[str] = None
        self.draft: Optional[ListingDraft] = None
        self.last_error: Optional[PipelineError] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def submit(
        self,
        identification: ItemIdentification,
        image_url: Optional[str] = None,
    ) -> Optional[ListingDraft]:
        """
        Start a run for a new identification.

        Any run in flight is superseded. Incomplete identifications leave the
        pipeline idle. Returns the draft, or None when the run failed or was
        superseded.
        """
        self.identification = identification
        self.image_url = image_url
        token = self._next_generation()

        if not identification.is_complete:
            logger.info("Identification incomplete, pipeline stays idle")
            self._set_state(PipelineState.IDLE)
            return None

        return await self._run(token, identification, image_url)

    async def update_credentials(
        self,
        credentials: CredentialSet,
        marketplace: Optional[MarketplaceSearch] = None,
    ) -> Optional[ListingDraft]:
        """
        Replace credentials (and optionally the marketplace handle). Re-runs
        the pipeline when an identification is already present.
        """
        self.credentials = credentials
        if marketplace is not None:
            self.marketplace = marketplace

        if self.identification is None or not self.identification.is_complete:
            return None

        logger.info("Credentials changed, regenerating draft")
        token = self._next_generation()
        return await self._run(token, self.identification, self.image_url)

    def _next_generation(self) -> int:
        self._generation += 1
        self.draft = None
        self.last_error = None
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _check_current(self, token: int, run_id: str) -> None:
        if not self._is_current(token):
            logger.info(f"Run {run_id} superseded, discarding its result")
            raise _Superseded()

    def _set_state(self, state: PipelineState) -> None:
        self.state = state
        if self.on_state_change:
            self.on_state_change(state)

    async def _run(
        self,
        token: int,
        identification: ItemIdentification,
        image_url: Optional[str],
    ) -> Optional[ListingDraft]:
        run_id = str(uuid.uuid4())[:8]
        logger.info(f"Starting run {run_id} for {identification.description!r}")
        stage = PipelineState.GROUNDING.value

        try:
            # Step 1: Market research
            self._set_state(PipelineState.GROUNDING)
            response = await self.researcher.research(identification.description)
            self._check_current(token, run_id)
            market = coerce_market_data(response)
            logger.info(f"Run {run_id}: market price range {market.price_range}")

            # Step 2: Comparable sold items
            stage = PipelineState.RETRIEVING_COMPARABLES.value
            self._set_state(PipelineState.RETRIEVING_COMPARABLES)
            comparables = await self.marketplace.find_comparables(identification.description, market)
            self._check_current(token, run_id)
            comparables = list(comparables or [])
            logger.info(f"Run {run_id}: {len(comparables)} comparable items")

            # Step 3: Draft
            stage = PipelineState.SYNTHESIZING.value
            self._set_state(PipelineState.SYNTHESIZING)
            draft = await self._synthesize(identification, market, comparables, image_url, run_id)
            self._check_current(token, run_id)

            # Step 4: Persist and emit
            stage = SAVING_STAGE
            self.history.save(draft)
        except _Superseded:
            return None
        except Exception as e:
            if not self._is_current(token):
                logger.info(f"Run {run_id} superseded, ignoring its failure: {e}")
                return None
            return self._fail(stage, e, run_id)

        self.draft = draft
        self._set_state(PipelineState.COMPLETE)
        logger.info(f"Run {run_id} complete: {draft.suggested_title!r}")
        if self.on_draft:
            self.on_draft(draft)
        return draft

    async def _synthesize(
        self,
        identification: ItemIdentification,
        market: MarketData,
        comparables: list[ComparableItem],
        image_url: Optional[str],
        run_id: str,
    ) -> ListingDraft:
        try:
            drafter = self._resolve_drafter()
        except MissingCredentialError as e:
            logger.info(f"Run {run_id}: {e}; using fallback synthesis")
            return self.synthesizer.synthesize(identification, market, comparables, image_url)

        enriched = complete_market_data(market, comparables, keyword_limit=self.keyword_limit)
        return await drafter.draft(identification, enriched, comparables, image_url=image_url)

    def _resolve_drafter(self):
        api_key = self.credentials.chat_gpt_api_key.strip()
        if not api_key:
            raise MissingCredentialError("No drafting API key configured")
        if self.drafter_factory is None:
            raise MissingCredentialError("No drafting backend configured")
        return self.drafter_factory(api_key)

    def _fail(self, stage: str, cause: Exception, run_id: str) -> None:
        error = PipelineError(stage, cause)
        logger.error(f"Run {run_id} failed: {error}")
        self.last_error = error
        self._set_state(PipelineState.FAILED)
        if self.on_error:
            self.on_error(error)
        return None
