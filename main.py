"""Main entry point for the Feast Scheduler."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import yaml

from feast_scheduler.engine.scheduler import Scheduler
from feast_scheduler.evaluation.evaluator import Evaluator
from feast_scheduler.evaluation.generator import FeastGenerator
from feast_scheduler.evaluation.validator import validate_schedule
from feast_scheduler.policies.hot_priority import HotPriorityPolicy
from feast_scheduler.utils.config import load_config, get_default_config, load_feast
from feast_scheduler.utils.datetime_utils import parse_target_time


def _load_config_or_default(config_path: str) -> dict:
    return load_config(config_path) if Path(config_path).exists() else get_default_config()


def run_scheduling(feast_path: str, config_path: str, target: str = None, output_dir: str = "results"):
    """Schedule a feast file and save the plan."""
    config = _load_config_or_default(config_path)
    recipes, kitchen, feast_target = load_feast(feast_path, config)

    if target:
        target_time = parse_target_time(target)
    elif feast_target:
        target_time = feast_target
    else:
        target_time = datetime.now().replace(hour=18, minute=0, second=0, microsecond=0)

    scheduler = Scheduler(HotPriorityPolicy(config), config)
    schedule, trace = scheduler.schedule(recipes, kitchen, target_time)

    print(schedule.to_human_readable())

    violations = validate_schedule(schedule, kitchen, config)
    for violation in violations:
        print(f"Constraint violation: {violation}")

    results_dir = Path(output_dir)
    results_dir.mkdir(exist_ok=True)

    schedule_path = results_dir / f"schedule_{schedule.schedule_id}.json"
    with open(schedule_path, 'w') as f:
        json.dump(schedule.to_dict(), f, indent=2, default=str)

    trace_path = results_dir / f"trace_{trace.run_id}.log"
    with open(trace_path, 'w') as f:
        f.write(trace.to_human_readable())

    print(f"\nSchedule saved to: {schedule_path}")
    print(f"Decision trace saved to: {trace_path}")

    return schedule, trace


def write_sample_feast(output_path: str, target: str = "18:00"):
    """Write the built-in sample feast as a YAML feast file."""
    recipes, kitchen = FeastGenerator().sample_feast()
    feast = {
        'target_time': target,
        'kitchen': kitchen.to_dict(),
        'recipes': [asdict(r) for r in recipes],
    }

    path = Path(output_path)
    with open(path, 'w') as f:
        yaml.safe_dump(feast, f, sort_keys=False)

    print(f"Sample feast saved to: {path}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Feast Scheduler: plan cooking steps backwards from serving time"
    )
    parser.add_argument(
        'command',
        choices=['schedule', 'evaluate', 'sample-feast'],
        help='Command to run'
    )
    parser.add_argument(
        'feast',
        nargs='?',
        default='feast.yaml',
        help='Feast file for schedule, output path for sample-feast (default: feast.yaml)'
    )
    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '--target',
        type=str,
        default=None,
        help='Serving time, HH:MM or ISO timestamp (default: from feast file, else 18:00 today)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='results',
        help='Directory for results (default: results)'
    )
    parser.add_argument(
        '--feasts',
        type=int,
        default=None,
        help='Number of generated feasts to evaluate'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'schedule':
        try:
            run_scheduling(args.feast, args.config, args.target, args.output)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    elif args.command == 'evaluate':
        config = _load_config_or_default(args.config)
        target_time = parse_target_time(args.target) if args.target else None
        Evaluator(config).run_evaluation(args.output, target_time, args.feasts)
    elif args.command == 'sample-feast':
        write_sample_feast(args.feast, args.target or "18:00")


if __name__ == "__main__":
    main()
