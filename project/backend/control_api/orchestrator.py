"""
Pipeline orchestration logic.

Runs a job through cancel -> script -> per-scene audio and visual sync ->
render handoff, then waits for the progress channel to report completion.
"""

import asyncio
from typing import Optional

from shared.config import Settings, settings as default_settings
from shared.errors import DataQualityError, GenerationTimeoutError, PipelineError
from shared.logging import get_logger, log_data_quality, set_job_id
from shared.models.config import PipelineConfig
from shared.models.events import CompletedEvent
from shared.models.job import Job, JobState, SceneOutcome
from shared.models.scene import Scene
from modules.consultant.voices import voice_for_style
from modules.generation.client import GenerationClient
from modules.script_writer.writer import ScriptWriter
from modules.visual_sync.duration import estimate_duration, measure_duration
from modules.visual_sync.prompt_generator import VisualPromptGenerator
from modules.visual_sync.sync import DurationSyncEngine, SyncContext
from control_api.services.operator_log import OperatorLog
from control_api.services.render_client import RenderClient

logger = get_logger(__name__)

SUPERSEDED = "SUPERSEDED"


class PipelineController:
    """
    Job lifecycle controller.

    One active job at a time. Starting a new job supersedes the previous one
    and always begins by cancelling whatever the render server is doing.
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        render_client: RenderClient,
        operator_log: OperatorLog,
        config: Optional[Settings] = None,
        script_writer: Optional[ScriptWriter] = None,
        sync_engine: Optional[DurationSyncEngine] = None
    ):
        self.settings = config or default_settings
        self.generation_client = generation_client
        self.render_client = render_client
        self.operator_log = operator_log
        self.script_writer = script_writer or ScriptWriter(generation_client)
        self.sync_engine = sync_engine or DurationSyncEngine(VisualPromptGenerator(generation_client))
        self.active_job: Optional[Job] = None

    def create_job(self, config: PipelineConfig) -> Job:
        """Create the new active job, superseding any unfinished one."""
        previous = self.active_job
        if previous is not None and not previous.is_terminal and previous.state != JobState.AWAITING:
            previous.error = "Superseded by a new job"
            previous.transition_to(JobState.FAILED)
            logger.info("Previous job superseded", extra={"previous_job_id": previous.job_id})

        job = Job(config=config)
        self.active_job = job
        return job

    async def start(self, config: PipelineConfig) -> Job:
        """Create a job and run it up to the awaiting state."""
        job = self.create_job(config)
        await self.run(job)
        return job

    async def run(self, job: Job) -> Job:
        """
        Drive a job from idle to awaiting.

        Failures end in the failed state with one operator error line; they
        are not raised to the caller.
        """
        set_job_id(job.job_id)
        logger.info("Pipeline started", extra={"topic": job.config.topic})
        try:
            await self._cancel_previous(job)
            await self._generate_script(job)
            await self._generate_audio(job)
            await self._handoff(job)
            self._advance(job, JobState.AWAITING)
            await self.operator_log.info("⏳ Waiting for the Director to finish rendering...")
        except PipelineError as e:
            await self._fail(job, e)
        except Exception as e:
            logger.error("Pipeline execution failed", exc_info=e)
            await self._fail(job, PipelineError(f"Pipeline execution failed: {str(e)}", job_id=job.job_id))
        return job

    def _advance(self, job: Job, state: JobState) -> None:
        if job is not self.active_job or job.is_terminal:
            raise PipelineError("Job superseded by a newer job", job_id=job.job_id, code=SUPERSEDED)
        job.transition_to(state)

    async def _cancel_previous(self, job: Job) -> None:
        self._advance(job, JobState.CANCELLING)
        try:
            await self.render_client.cancel()
        except PipelineError as e:
            await self.operator_log.warning(f"⚠️ Could not cancel previous render: {e.message}")

    async def _generate_script(self, job: Job) -> None:
        self._advance(job, JobState.SCRIPT_GENERATION)
        await self.operator_log.info(f"📝 Writing script for: {job.config.topic}")
        timeout = self.settings.script_timeout_seconds
        try:
            script = await asyncio.wait_for(self.script_writer.generate(job.config), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(
                f"Script generation timed out after {timeout:.0f}s",
                job_id=job.job_id,
                code="SCRIPT_TIMEOUT"
            ) from e

        job.title = script.title
        job.scenes = script.scenes
        job.subject_registry = script.subject_registry
        await self.operator_log.info(f"✅ Script ready: {job.title} ({len(job.scenes)} scenes)")

    async def _generate_audio(self, job: Job) -> None:
        self._advance(job, JobState.AUDIO_GENERATION)
        voice_id = job.config.voice_id or voice_for_style(job.config.voice_style).id
        context = SyncContext.from_config(job.config)

        for scene in job.scenes:
            if job is not self.active_job:
                raise PipelineError("Job superseded by a newer job", job_id=job.job_id, code=SUPERSEDED)
            outcome = await self._process_scene(scene, voice_id, context)
            job.report.append(outcome)

        job.refresh_time_ranges()
        failed = sum(1 for outcome in job.report if not outcome.ok)
        logger.info(
            "Audio stage finished",
            extra={"scenes": len(job.scenes), "failed_scenes": failed}
        )

    async def _process_scene(self, scene: Scene, voice_id: str, context: SyncContext) -> SceneOutcome:
        """Audio, duration and visual sync for one scene. Never raises PipelineError."""
        error = None
        if scene.has_narration:
            await self.operator_log.info(f"🎙️ Generating voiceover for scene {scene.index}...")
            try:
                scene.audio_url = await self.render_client.generate_voiceover(
                    scene.voiceover, voice_id, scene.index
                )
            except PipelineError as e:
                error = e.message
                await self.operator_log.warning(f"⚠️ Audio failed for scene {scene.index}: {e.message}")
            except Exception as e:
                logger.error(
                    f"Scene {scene.index}: unexpected voiceover failure",
                    exc_info=e,
                    extra={"scene_index": scene.index}
                )
                error = str(e) or type(e).__name__
                await self.operator_log.warning(f"⚠️ Audio failed for scene {scene.index}: {error}")

        duration = await self._measure(scene) if scene.audio_url else None
        if duration is not None:
            scene.duration = duration
            scene.duration_source = "measured"
        else:
            if scene.audio_url:
                logger.warning(
                    f"Scene {scene.index}: could not measure audio, using estimate",
                    extra={"scene_index": scene.index}
                )
            scene.duration = estimate_duration(
                scene.voiceover,
                self.settings.words_per_second,
                self.settings.min_estimated_duration_seconds
            )
            scene.duration_source = "estimated"

        sync = await self.sync_engine.reconcile(scene, self.settings.clip_length_seconds, context)

        return SceneOutcome(
            scene_index=scene.index,
            ok=error is None,
            error=error,
            audio_url=scene.audio_url,
            duration=scene.duration,
            duration_source=scene.duration_source,
            sync=sync.value
        )

    async def _measure(self, scene: Scene) -> Optional[float]:
        if not self.settings.measure_audio_duration:
            return None
        try:
            data = await self.render_client.fetch_artifact(scene.audio_url)
            return measure_duration(data)
        except PipelineError as e:
            logger.warning(f"Scene {scene.index}: audio fetch failed: {e.message}")
        except Exception as e:
            logger.warning(f"Scene {scene.index}: audio measurement failed", exc_info=e)
        return None

    async def _handoff(self, job: Job) -> None:
        self._advance(job, JobState.HANDOFF)
        if job.handoff_submitted:
            raise PipelineError("Job was already handed off", job_id=job.job_id, code="DUPLICATE_HANDOFF")

        job.handoff_submitted = True
        response = await self.render_client.submit_job(job.descriptor())
        folder = response.get("folder") or response.get("projectFolder")
        if folder:
            await self.assign_folder(str(folder), job)
        await self.operator_log.info(f"🚀 Handed off {len(job.scenes)} scenes to the Director")

    async def assign_folder(self, folder: str, job: Optional[Job] = None) -> None:
        """Record the render folder. The first non-empty value wins."""
        job = job or self.active_job
        if job is None:
            logger.debug("Folder reported with no active job", extra={"folder": folder})
            return
        if not job.assign_folder(folder):
            issue = DataQualityError(
                f"Conflicting output folder '{folder}' ignored, keeping '{job.folder}'",
                job_id=job.job_id,
                code="FOLDER_CONFLICT"
            )
            log_data_quality(logger, issue)

    async def handle_completed(self, event: CompletedEvent) -> None:
        """Completion reported by the progress channel."""
        job = self.active_job
        if job is None or job.state != JobState.AWAITING:
            logger.debug("Completion event without an awaiting job")
            return
        job.transition_to(JobState.COMPLETED)
        logger.info("Pipeline completed", extra={"job_id": job.job_id})

    async def _fail(self, job: Job, error: PipelineError) -> None:
        if error.code == SUPERSEDED or job.is_terminal:
            logger.info("Stopping superseded job", extra={"job_id": job.job_id})
            return
        job.error = error.message
        job.transition_to(JobState.FAILED)
        logger.error(
            "Pipeline failed",
            exc_info=error,
            extra={"job_id": job.job_id, "error_code": error.code}
        )
        await self.operator_log.error(f"❌ Pipeline failed: {error.message}")
