"""Attribution orchestrator.

Runs the full attribution pipeline for one contact or a sample of contacts:
fetch from the contact store, normalize touchpoints, build the timeline,
classify the journey, allocate credit per deal and estimate certainty.
"""

from __future__ import annotations

import asyncio
import logging

from leadpath.attribution.allocation import (
    allocate_credit,
    channel_breakdown,
    channel_influence,
    significant_touchpoints,
)
from leadpath.attribution.analytics import project_stats, summarize_results
from leadpath.attribution.certainty import estimate_certainty
from leadpath.attribution.classifier import classify_journey
from leadpath.attribution.config import AttributionConfig
from leadpath.attribution.exceptions import ContactNotFoundError
from leadpath.attribution.normalizer import TouchpointNormalizer
from leadpath.attribution.schema import (
    AttributionChain,
    AttributionFailure,
    AttributionResult,
    AttributionStats,
    BulkAttributionResult,
    DateRange,
    Touchpoint,
)
from leadpath.attribution.timeline import build_timeline, prior_to_deal
from leadpath.contacts import Contact, ContactStore, Deal

logger = logging.getLogger(__name__)


class AttributionOrchestrator:
    """Attribute deals to the touchpoints that led to them.

    Example:
        >>> store = InMemoryContactStore.from_json_file("contacts.json")
        >>> orchestrator = AttributionOrchestrator(store)
        >>> result = orchestrator.attribute_contact("C-1")
        >>> for chain in result.attribution_chains:
        ...     print(chain.deal_id, chain.attribution_model, chain.touchpoint_weights)
    """

    def __init__(
        self,
        store: ContactStore,
        config: AttributionConfig | None = None,
        normalizer: TouchpointNormalizer | None = None,
    ):
        """Initialize orchestrator.

        Args:
            store: Source of contacts, raw touchpoint records and deals.
            config: Engine configuration. Defaults to AttributionConfig().
            normalizer: Touchpoint normalizer. Defaults to the standard
                field maps of every platform.
        """
        self.store = store
        self.config = config or AttributionConfig()
        self.normalizer = normalizer or TouchpointNormalizer()

    def attribute_contact(
        self,
        contact_id: str,
        date_range: DateRange | None = None,
    ) -> AttributionResult:
        """Attribute every deal of one contact.

        Args:
            contact_id: Contact to attribute.
            date_range: Only deals created inside this window get a chain.

        Returns:
            AttributionResult with one chain per deal.

        Raises:
            ContactNotFoundError: If the store has no such contact.
        """
        contact = self.store.get_contact(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        return self._attribute(contact, date_range)

    def _attribute(self, contact: Contact, date_range: DateRange | None) -> AttributionResult:
        sources = self.store.get_touchpoint_sources(contact.id)
        deals = self.store.get_deals_by_contact(contact.id)

        timeline = build_timeline(self.normalizer.normalize_sources(sources))
        model = classify_journey(timeline)
        influence = channel_influence(timeline)

        chains = [
            self._build_chain(contact, timeline, deal, deals)
            for deal in deals
            if date_range is None or date_range.contains(deal.created_at)
        ]

        if chains:
            certainty = max(chain.attribution_certainty for chain in chains)
        else:
            certainty = estimate_certainty(
                contact,
                timeline,
                influence,
                model,
                [],
                weights=self.config.factor_weights,
                cap=self.config.certainty_cap,
            )

        logger.debug(
            f"Attributed contact {contact.id}: {len(timeline)} touchpoints, "
            f"{len(chains)} deals, model {model.value}"
        )

        return AttributionResult(
            contact=contact,
            timeline=timeline,
            attribution_model=model,
            channel_influence=influence,
            channel_breakdown=channel_breakdown(timeline),
            attribution_chains=chains,
            attribution_certainty=certainty,
        )

    def _build_chain(
        self,
        contact: Contact,
        timeline: list[Touchpoint],
        deal: Deal,
        deals: list[Deal],
    ) -> AttributionChain:
        prior = prior_to_deal(timeline, deal)
        model = classify_journey(prior)
        weights = allocate_credit(prior, model, cutoff=deal.created_at)
        influence = channel_influence(prior)

        return AttributionChain(
            contact_id=contact.id,
            deal_id=deal.id,
            deal_value=deal.value,
            deal_status=deal.status,
            attribution_model=model,
            touchpoint_weights=weights,
            significant_touchpoints=significant_touchpoints(
                prior, weights, self.config.materiality_threshold
            ),
            channel_influence=influence,
            attribution_certainty=estimate_certainty(
                contact,
                prior,
                influence,
                model,
                deals,
                weights=self.config.factor_weights,
                cap=self.config.certainty_cap,
            ),
            total_touchpoints=len(prior),
        )

    def _resolve_sample_size(self, sample_size: int | None) -> int:
        if sample_size is None:
            return self.config.default_sample_size
        if sample_size < 1:
            raise ValueError(f"sample_size must be at least 1, got {sample_size}")
        if sample_size > self.config.max_sample_size:
            raise ValueError(
                f"sample_size must be at most {self.config.max_sample_size}, got {sample_size}"
            )
        return sample_size

    def _attribute_or_fail(
        self,
        contact: Contact,
        date_range: DateRange | None,
    ) -> AttributionResult | AttributionFailure:
        try:
            return self._attribute(contact, date_range)
        except Exception as e:
            logger.exception(f"Attribution failed for contact {contact.id}: {e}")
            return AttributionFailure(contact_id=contact.id, error=str(e))

    def _summarize(
        self,
        outcomes: list[AttributionResult | AttributionFailure],
        sample_size: int,
    ) -> BulkAttributionResult:
        results = [o for o in outcomes if isinstance(o, AttributionResult)]
        failures = [o for o in outcomes if isinstance(o, AttributionFailure)]

        bulk = summarize_results(
            results,
            failures,
            sample_size=sample_size,
            high_certainty_threshold=self.config.high_certainty_threshold,
        )
        logger.info(
            f"Bulk attribution: {bulk.total_contacts} contacts attributed, "
            f"{bulk.failed_contacts} failed"
        )
        return bulk

    def attribute_all_contacts(
        self,
        sample_size: int | None = None,
        date_range: DateRange | None = None,
    ) -> BulkAttributionResult:
        """Attribute a sample of contacts and aggregate the results.

        A contact whose attribution fails is logged and listed in
        ``failures``; it never aborts the run.

        Args:
            sample_size: Contacts to sample. Defaults to
                config.default_sample_size.
            date_range: Only deals created inside this window are attributed.

        Returns:
            BulkAttributionResult over the successfully attributed contacts.

        Raises:
            ValueError: If sample_size is below 1 or above config.max_sample_size.
        """
        n = self._resolve_sample_size(sample_size)
        contacts = self.store.get_contact_sample(n)

        outcomes = [self._attribute_or_fail(contact, date_range) for contact in contacts]
        return self._summarize(outcomes, n)

    async def attribute_all_contacts_async(
        self,
        sample_size: int | None = None,
        date_range: DateRange | None = None,
        batch_size: int | None = None,
    ) -> BulkAttributionResult:
        """Async variant of attribute_all_contacts.

        Contacts are attributed in batches of ``batch_size`` running
        concurrently in worker threads. Results are identical to the
        sequential run.
        """
        n = self._resolve_sample_size(sample_size)
        batch_size = batch_size or self.config.batch_size
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        contacts = await asyncio.to_thread(self.store.get_contact_sample, n)

        outcomes: list[AttributionResult | AttributionFailure] = []
        for start in range(0, len(contacts), batch_size):
            batch = contacts[start : start + batch_size]
            outcomes.extend(
                await asyncio.gather(
                    *(
                        asyncio.to_thread(self._attribute_or_fail, contact, date_range)
                        for contact in batch
                    )
                )
            )

        return self._summarize(outcomes, n)

    def get_attribution_stats(
        self,
        date_range: DateRange | None = None,
        sample_size: int | None = None,
    ) -> AttributionStats:
        """Dashboard statistics over a sample of contacts.

        Returns:
            AttributionStats with the accuracy (average certainty as a
            percentage) and the stats payload.
        """
        bulk = self.attribute_all_contacts(sample_size=sample_size, date_range=date_range)
        return project_stats(bulk)

    async def get_attribution_stats_async(
        self,
        date_range: DateRange | None = None,
        sample_size: int | None = None,
    ) -> AttributionStats:
        """Async variant of get_attribution_stats."""
        bulk = await self.attribute_all_contacts_async(
            sample_size=sample_size, date_range=date_range
        )
        return project_stats(bulk)
