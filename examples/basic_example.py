#!/usr/bin/env python3
"""
Example script demonstrating the usage of typed_cmdline.

This script shows how to describe a command line with a dataclass and turn
the process arguments into a typed options object.

    python basic_example.py run.log --temperature 30.5 -v
    python basic_example.py --help
"""

import sys
from dataclasses import dataclass
from typing import Literal, Optional

from typed_cmdline import ConfigFileFilter, argument, option, parse_into_or_show_usage


@dataclass
class SimulationConfig:
    """Configuration for simulation parameters."""

    name: str = argument(0, required=True, help="Name of the simulation")
    temperature: float = option(
        "t", default_value="27.0", help="Temperature in Celsius"
    )
    num_simulations: int = option(
        "n", default_value="100", help="Number of simulations to run"
    )
    process_type: Literal["typeA", "typeB"] = option(
        default_value="typeA", help="Type of processing to use"
    )
    verbose: bool = option("v", help="Enable verbose output")
    output_dir: str = argument(1, help="Output directory path", default="/tmp/output")


def main(argv: Optional[list[str]] = None) -> int:
    """Main function demonstrating the parser."""
    args = sys.argv[1:] if argv is None else argv
    config = parse_into_or_show_usage(
        SimulationConfig, args, [ConfigFileFilter()], prog="simulate"
    )
    if config is None:
        return 2

    print("Parsed Configuration:")
    print("-" * 30)
    print(f"Simulation Name: {config.name}")
    print(f"Output Directory: {config.output_dir}")
    print(f"Temperature: {config.temperature}°C")
    print(f"Number of Simulations: {config.num_simulations}")
    print(f"Process Type: {config.process_type}")
    print(f"Verbose: {config.verbose}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
