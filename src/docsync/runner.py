"""Documentation refresh orchestration."""

from __future__ import annotations

from docsync.changes import ChangeSet, GitClient, GitCommandError
from docsync.config import DocSyncConfig
from docsync.index import (
    ConsentPrompt,
    IndexStepResult,
    ProjectIndex,
    decline,
    run_index_step,
)
from docsync.mapping import build_rules, evaluate_paths
from docsync.planner import MODE_FULL, MODE_INCREMENTAL, Preflight, preflight, select_strategy
from docsync.render import render_quick_reference, render_topic, update_document
from docsync.security import relative_posix, resolve_output_path
from docsync.signals import (
    SOURCE_DIRECT,
    SOURCE_INDEX,
    SourceSignals,
    TopicEvidence,
    collect_signals,
    detect_evidence,
    discover_paths,
)
from docsync.summary import RunSummary
from docsync.topics import ALL_TOPICS, ordered, topic_by_name


class DocRefresh:
    """Runs one documentation refresh against a repository."""

    def __init__(
        self,
        config: DocSyncConfig,
        consent: ConsentPrompt = decline,
        git: GitClient | None = None,
        index: ProjectIndex | None = None,
    ) -> None:
        self._config = config
        self._repo_root = config.repo_root
        self._consent = consent
        self._docs_dir = resolve_output_path(self._repo_root, config.docs.dir)
        self._quick_reference = resolve_output_path(self._repo_root, config.docs.quick_reference)
        self._docs_rel = relative_posix(self._repo_root, self._docs_dir)
        self._quick_reference_rel = relative_posix(self._repo_root, self._quick_reference)
        self._git = git or GitClient(self._repo_root)
        self._index = index or ProjectIndex(self._repo_root, config.index)
        self._rules = build_rules(config.extra_rules)

    @property
    def output_paths(self) -> tuple[str, str]:
        return (self._docs_rel, self._quick_reference_rel)

    def preflight(self) -> Preflight:
        return preflight(self._docs_dir, self._quick_reference, self._index, self._git)

    def run(self) -> RunSummary:
        """Choose a strategy, regenerate affected documents and report what happened."""
        checks = self.preflight()
        strategy = select_strategy(checks.index_present, checks.docs_present)
        notes: list[str] = []

        index_step = run_index_step(
            self._index,
            index_present=checks.index_present,
            docs_present=checks.docs_present,
            consent=self._consent,
        )
        if index_step.detail:
            notes.append(index_step.detail)
        source = SOURCE_INDEX if index_step.index_present else SOURCE_DIRECT

        mode = strategy.mode
        changes: ChangeSet | None = None
        if mode == MODE_INCREMENTAL:
            changes = self._detect_changes(checks, notes)
            if changes is None:
                mode = MODE_FULL

        if mode == MODE_INCREMENTAL and changes is not None:
            return self._run_incremental(source, index_step, checks, changes, notes)
        return self._run_full(source, index_step, checks, notes)

    def _detect_changes(self, checks: Preflight, notes: list[str]) -> ChangeSet | None:
        if not checks.under_version_control:
            notes.append(
                "Not a git work tree; incremental update unavailable, ran full regeneration."
            )
            return None
        watermark = self._git.find_watermark(self.output_paths)
        if watermark is None:
            notes.append(
                "Documentation has never been committed; no watermark, ran full regeneration."
            )
            return None
        try:
            changes = self._git.changed_paths(
                watermark, include_untracked=self._config.changes.include_untracked
            )
        except GitCommandError as error:
            notes.append(f"Change detection failed ({error}); ran full regeneration.")
            return None
        return changes.without(self.output_paths)

    def _run_full(
        self,
        source: str,
        index_step: IndexStepResult,
        checks: Preflight,
        notes: list[str],
    ) -> RunSummary:
        signals = self._collect_signals(source, notes)
        evidence = detect_evidence(signals, self._rules)
        selected = {topic.name for topic in ALL_TOPICS if topic.unconditional}
        selected.update(name for name, found in evidence.items() if found.found)
        topics = ordered(selected)

        regenerated, written = self._write_topics(topics, signals, evidence)
        skipped = tuple(
            self._doc_rel(topic.filename) for topic in ALL_TOPICS if topic.name not in selected
        )
        quick_reference_updated = self._write_quick_reference(signals)
        return RunSummary(
            mode=MODE_FULL,
            source=source,
            index_outcome=index_step.outcome,
            index_status=self._index.status(),
            degraded=index_step.degraded,
            under_version_control=checks.under_version_control,
            watermark=None,
            changed_paths=(),
            change_partition={},
            no_impact_paths=(),
            affected_topics=topics,
            regenerated=regenerated,
            written=written,
            skipped=skipped,
            quick_reference=self._quick_reference_rel,
            quick_reference_updated=quick_reference_updated,
            notes=tuple(notes),
        )

    def _run_incremental(
        self,
        source: str,
        index_step: IndexStepResult,
        checks: Preflight,
        changes: ChangeSet,
        notes: list[str],
    ) -> RunSummary:
        impact = evaluate_paths(changes.paths, self._rules)
        regenerated: tuple[str, ...] = ()
        written: tuple[str, ...] = ()
        quick_reference_updated = False
        if impact.affected_topics:
            signals = self._collect_signals(source, notes)
            evidence = detect_evidence(signals, self._rules)
            regenerated, written = self._write_topics(impact.affected_topics, signals, evidence)
            quick_reference_updated = self._write_quick_reference(signals)
        skipped = tuple(
            self._doc_rel(topic.filename)
            for topic in ALL_TOPICS
            if topic.name not in impact.affected_topics
            and (self._docs_dir / topic.filename).is_file()
        )
        return RunSummary(
            mode=MODE_INCREMENTAL,
            source=source,
            index_outcome=index_step.outcome,
            index_status=self._index.status(),
            degraded=index_step.degraded,
            under_version_control=checks.under_version_control,
            watermark=changes.watermark,
            changed_paths=changes.paths,
            change_partition={
                "committed": changes.committed,
                "staged": changes.staged,
                "unstaged": changes.unstaged,
                "untracked": changes.untracked,
            },
            no_impact_paths=impact.no_impact_paths,
            affected_topics=impact.affected_topics,
            regenerated=regenerated,
            written=written,
            skipped=skipped,
            quick_reference=self._quick_reference_rel,
            quick_reference_updated=quick_reference_updated,
            notes=tuple(notes),
        )

    def _collect_signals(self, source: str, notes: list[str]) -> SourceSignals:
        paths: tuple[str, ...] | None = None
        if source == SOURCE_INDEX:
            paths = self._index.source_paths()
            if paths is None:
                notes.append("Project index has no readable file list; listed files directly.")
            else:
                paths = tuple(path for path in paths if not self._is_output(path))
        if paths is None:
            discovery = discover_paths(
                self._repo_root,
                self._config.discovery,
                excluded_prefixes=self.output_paths,
            )
            if discovery.truncated:
                notes.append(
                    f"Source listing stopped at {self._config.discovery.max_files} files."
                )
            paths = discovery.paths
        return collect_signals(self._repo_root, paths, source)

    def _write_topics(
        self,
        topics: tuple[str, ...],
        signals: SourceSignals,
        evidence: dict[str, TopicEvidence],
    ) -> tuple[tuple[str, ...], tuple[str, ...]]:
        regenerated: list[str] = []
        written: list[str] = []
        for name in topics:
            topic = topic_by_name(name)
            body = render_topic(name, signals, evidence)
            target = self._docs_dir / topic.filename
            rel = self._doc_rel(topic.filename)
            regenerated.append(rel)
            if update_document(target, body):
                written.append(rel)
        return tuple(regenerated), tuple(written)

    def _write_quick_reference(self, signals: SourceSignals) -> bool:
        documented = tuple(
            topic.name for topic in ALL_TOPICS if (self._docs_dir / topic.filename).is_file()
        )
        body = render_quick_reference(signals, self._docs_rel, documented)
        return update_document(self._quick_reference, body)

    def _doc_rel(self, filename: str) -> str:
        return f"{self._docs_rel}/{filename}"

    def _is_output(self, path: str) -> bool:
        for prefix in self.output_paths:
            if path == prefix or path.startswith(f"{prefix}/"):
                return True
        return False

