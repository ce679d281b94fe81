# config/tools/validate_nav_config.py

import sys           # for exit codes
from dataclasses import asdict
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_nav_config.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from nav_env.loader import load_nav_profile  # import our loader


def main(argv=None) -> None:
    """Load and print the resolved nav profile, failing fast on errors."""
    args = sys.argv[1:] if argv is None else argv
    name = args[0] if args else None
    try:
        profile = load_nav_profile(name)     # NAV_PROFILE / NAV_CONFIG honored
    except (FileNotFoundError, KeyError, ValueError, TypeError) as e:
        print("Nav config validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("Nav config validation OK.")
    print("\nActive profile:", profile.name)
    for section in ("grid", "ground_probe", "maintainer", "direction_field",
                    "movement", "waypoints", "search"):
        print(f"\n{section}:")
        pprint(asdict(getattr(profile, section)))


if __name__ == "__main__":
    main()  # run main() only when script is executed directly
