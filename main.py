from __future__ import annotations

import logging

from posekinetics.pipeline.runner import build_parser, run_pipeline


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_pipeline(args)


if __name__ == "__main__":
    main()
