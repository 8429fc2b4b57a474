"""
CLI to estimate learning content -> JSON, or run a study timer in the terminal.
"""
from __future__ import annotations
import argparse, asyncio, json, os, sys
from estimator.config import Settings
from estimator.errors import EstimatorError
from estimator.pipeline import EstimationService
from estimator.timefmt import validate_timer_duration
from estimator.tracker import ProgressTracker


def _load_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

def run_estimate(args, settings: Settings) -> int:
    content = _load_json(args.content)
    profile = _load_json(args.profile) if args.profile else None
    config = settings.estimation_config().model_copy(update={
        "use_personalization": settings.USE_PERSONALIZATION and not args.no_personalization,
        "include_break_time": settings.INCLUDE_BREAK_TIME and not args.no_breaks,
        "include_interaction_time": settings.INCLUDE_INTERACTION_TIME and not args.no_interaction,
    })
    try:
        estimate, _ = EstimationService(settings=settings).estimate(content, profile, config)
    except EstimatorError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    result = estimate.model_dump(mode="json", by_alias=True)
    print(json.dumps(result, indent=2, ensure_ascii=False))

    if args.out:
        os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
        print(f"Estimate written to {args.out}", file=sys.stderr)
    return 0

async def _countdown(seconds: float, interval: float) -> ProgressTracker:
    loop = asyncio.get_running_loop()
    done = loop.create_future()

    def on_tick(state):
        print(f"\r{tracker.formatted_time()}  {state.progress:5.1f}%", end="", flush=True)

    def on_complete():
        if not done.done():
            done.set_result(None)

    tracker = ProgressTracker(
        seconds, variant="countdown", interval=interval, clock=loop.time,
        scheduler=loop, on_tick=on_tick, on_complete=on_complete,
    )
    tracker.start()
    try:
        await done
    finally:
        tracker.pause()
    print()
    return tracker

def run_timer(args, settings: Settings) -> int:
    check = validate_timer_duration(args.seconds, args.context)
    if not check.is_valid:
        print(f"warning: {check.error}; using {check.duration:g}s", file=sys.stderr)
    try:
        tracker = asyncio.run(_countdown(check.duration, settings.TIMER_INTERVAL))
    except KeyboardInterrupt:
        print("\ninterrupted", file=sys.stderr)
        return 130
    print(f"Done: {tracker.elapsed:.0f}s elapsed")
    return 0

def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Learning time estimation")
    sub = p.add_subparsers(dest="command", required=True)

    e = sub.add_parser("estimate", help="Estimate a content JSON file")
    e.add_argument("content", help="Path to MixedContent JSON")
    e.add_argument("--profile", help="Path to UserProfile JSON")
    e.add_argument("--out", help="Also write the estimate to this path")
    e.add_argument("--no-personalization", action="store_true")
    e.add_argument("--no-breaks", action="store_true")
    e.add_argument("--no-interaction", action="store_true")

    t = sub.add_parser("timer", help="Run a countdown in the terminal")
    t.add_argument("seconds", type=float)
    t.add_argument("--context", default="general", choices=["quiz", "ai", "learning", "general"])

    args = p.parse_args(argv)
    settings = Settings()
    if args.command == "estimate":
        return run_estimate(args, settings)
    return run_timer(args, settings)

if __name__ == "__main__":
    sys.exit(main())
