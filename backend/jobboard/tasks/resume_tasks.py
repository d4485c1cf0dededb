"""
Resume analysis tasks

Fire-and-forget: a task is acknowledged on receipt and never retried. A
worker lost mid-run leaves the record in processing until it is reprocessed.
"""
from typing import Optional
from celery import Task
from celery.signals import worker_process_init, worker_process_shutdown, worker_shutdown
import structlog

from jobboard.analysis.factory import build_orchestrator
from jobboard.analysis.orchestrator import AnalysisOrchestrator
from jobboard.core.celery_app import celery_app

logger = structlog.get_logger()


class AnalysisTask(Task):
    """Task base owning the process-wide orchestrator"""

    _orchestrator: Optional[AnalysisOrchestrator] = None

    @property
    def orchestrator(self) -> AnalysisOrchestrator:
        if AnalysisTask._orchestrator is None:
            AnalysisTask.use_orchestrator(build_orchestrator())
        return AnalysisTask._orchestrator

    @classmethod
    def use_orchestrator(cls, orchestrator: AnalysisOrchestrator):
        """Install the orchestrator used by every analysis task in this process"""
        AnalysisTask._orchestrator = orchestrator
        logger.info("analysis_orchestrator_bound", ai_enabled=orchestrator.ai_enabled)

    @classmethod
    def shutdown_orchestrator(cls):
        """Close and drop the orchestrator; the next task builds a new one"""
        orchestrator = AnalysisTask._orchestrator
        AnalysisTask._orchestrator = None
        if orchestrator is not None:
            orchestrator.close()
            logger.info("analysis_orchestrator_released")


@celery_app.task(bind=True, base=AnalysisTask, max_retries=0, acks_late=False, ignore_result=True)
def analyze_resume_task(self: AnalysisTask, resume_id: int):
    """Extract and analyze one resume, leaving it completed or failed"""
    logger.info("analyze_resume_task_started", resume_id=resume_id, task_id=self.request.id)
    status = self.orchestrator.run(resume_id)
    logger.info("analyze_resume_task_finished", resume_id=resume_id, status=status)
    return status


@worker_process_init.connect
def _bind_orchestrator(**kwargs):
    AnalysisTask.use_orchestrator(build_orchestrator())


@worker_process_shutdown.connect
@worker_shutdown.connect
def _release_orchestrator(**kwargs):
    AnalysisTask.shutdown_orchestrator()
