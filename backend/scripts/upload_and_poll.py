"""
Upload a resume through the API and poll until analysis finishes

Usage: python scripts/upload_and_poll.py <file> [--reprocess <resume_id>]

Reads JOBBOARD_API_URL, JOBBOARD_API_TOKEN, JOBBOARD_POLL_INTERVAL_SECONDS
and JOBBOARD_POLL_MAX_ATTEMPTS from the environment.
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog

from jobboard.client.api_client import ResumeApiClient, ResumeClientError
from jobboard.client.config import PollerSettings
from jobboard.client.poller import PollResult, StatusPoller


def _print_progress(result: PollResult):
    print(f"  attempt {result.attempts}: {result.status}")


def _report(client: ResumeApiClient, resume_id: int, result: PollResult) -> int:
    if result.transport_error:
        print(f"⚠️  Polling stopped: {result.transport_error} (last status: {result.status})")
        return 1
    if result.cancelled:
        print(f"⚠️  Polling cancelled (last status: {result.status})")
        return 1
    if result.exhausted:
        print(f"⏳ Still processing after {result.attempts} checks. Check again later with resume ID {resume_id}.")
        return 0
    if result.status == "failed":
        print(f"❌ Analysis failed: {result.error}")
        return 1

    resume = client.get(resume_id)
    analysis = resume.get("analysis") or {}
    print(f"✅ Analysis completed ({resume.get('analyzed_by')})")
    if analysis.get("analysis_notice"):
        print(f"   Note: {analysis['analysis_notice']}")
    print(f"   Summary: {analysis.get('summary')}")
    print(f"   Level: {analysis.get('experience_level')}")
    print(f"   Overall score: {(analysis.get('overall_score') or {}).get('score')}")
    return 0


def main() -> int:
    # Server settings are never loaded in the client
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))
    args = sys.argv[1:]
    if not args:
        print(__doc__)
        return 1

    settings = PollerSettings()
    with ResumeApiClient.from_settings(settings) as client:
        poller = StatusPoller.for_client(client, settings)
        try:
            if args[0] == "--reprocess":
                submitted = client.reprocess(int(args[1]))
            else:
                submitted = client.upload(args[0])
        except ResumeClientError as e:
            print(f"❌ {e.message}")
            return 1

        resume_id = submitted["id"]
        print(f"Resume {resume_id} submitted, status: {submitted['processing_status']}")
        try:
            result = poller.poll(resume_id, initial_status=submitted["processing_status"], on_update=_print_progress)
        except KeyboardInterrupt:
            poller.cancel()
            print("\nStopped polling; the server keeps processing.")
            return 1
        return _report(client, resume_id, result)


if __name__ == "__main__":
    sys.exit(main())
