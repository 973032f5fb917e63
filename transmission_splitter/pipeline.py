import logging
from dataclasses import dataclass, field

from .collector import StemCollector
from .configs import Settings
from .fetcher import SourceFetcher
from .models import Job, JobPhase, PipelineState
from .s3io import ObjectStore
from .separator import Separator
from .uploader import ChannelUploader
from .workspace import Workspace

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    job_id: str
    stems: list[str] = field(default_factory=list)
    uploaded: int = 0


class PipelineOrchestrator:
    """
    Runs one transmission through fetch -> separate -> collect -> upload.

    The workspace is torn down exactly once after the last stage that ran,
    whether the chain completed or not. A stage failure is re-raised unchanged
    after teardown; teardown problems are only logged.
    An orchestrator instance handles a single job.
    """

    def __init__(
        self,
        workspace: Workspace,
        fetcher: SourceFetcher,
        separator: Separator,
        collector: StemCollector,
        uploader: ChannelUploader,
    ):
        self.workspace = workspace
        self.fetcher = fetcher
        self.separator = separator
        self.collector = collector
        self.uploader = uploader
        self.state = PipelineState.idle
        self.history: list[PipelineState] = [PipelineState.idle]
        self.job: Job | None = None

    @classmethod
    def from_settings(cls, settings: Settings, store: ObjectStore | None = None) -> "PipelineOrchestrator":
        store = store or ObjectStore(settings.bucket)
        workspace = Workspace(settings.tmp_root)
        separator = Separator(
            output_root=settings.tool_output_root,
            model=settings.model,
            executable=settings.executable,
            timeout=settings.separator_timeout,
        )
        return cls(
            workspace=workspace,
            fetcher=SourceFetcher(store, workspace),
            separator=separator,
            collector=StemCollector(workspace, separator.output_dir, max_workers=settings.max_workers),
            uploader=ChannelUploader(store, workspace, max_workers=settings.max_workers),
        )

    def _enter(self, state: PipelineState) -> None:
        LOG.debug("%s: %s -> %s", self.job.id, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _execute(self, job: Job) -> RunResult:
        self.workspace.ensure(self.workspace.root(job.id))

        self._enter(PipelineState.fetching)
        asset = self.fetcher.fetch(job.id)
        job.advance(JobPhase.fetched)

        self._enter(PipelineState.separating)
        self.separator.separate(asset.path)
        job.advance(JobPhase.separated)

        self._enter(PipelineState.collecting)
        stems = self.collector.collect(job.id)
        job.advance(JobPhase.collected)

        self._enter(PipelineState.uploading)
        uploaded = self.uploader.upload_all(job.id)
        job.advance(JobPhase.uploaded)

        self._enter(PipelineState.done)
        return RunResult(job_id=job.id, stems=sorted(s.name for s in stems), uploaded=uploaded)

    def run(self, job_id: str) -> RunResult:
        if self.job is not None:
            raise RuntimeError(f"Orchestrator already ran job {self.job.id}")
        # Validates the id before any path is derived from it.
        job = self.job = Job(id=job_id)
        LOG.info("Starting transmission %s", job_id)

        try:
            with self.workspace.claim(job_id):
                try:
                    result = self._execute(job)
                finally:
                    self._enter(PipelineState.cleanup)
        except Exception as e:
            job.error = f"{type(e).__name__}: {e}"
            LOG.error("Transmission %s failed while %s: %s", job_id, self.history[-2].value, e)
            raise
        finally:
            job.advance(JobPhase.cleaned)

        LOG.info("Transmission %s done, uploaded %d channel(s)", job_id, result.uploaded)
        return result
