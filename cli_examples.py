#!/usr/bin/env python3
"""
Examples of using the elemental CLI for different scenarios.
"""

import subprocess


def run_cli_command(args):
    """Run a CLI command and capture its output."""
    cmd = ["elemental-cli"] + args
    print(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
        print(result.stdout)
        if result.stderr:
            print(f"Stderr: {result.stderr}")
        print("-" * 50)
        return result.returncode == 0
    except subprocess.TimeoutExpired:
        print("Command timed out")
        return False


def main():
    """Run various CLI examples."""
    print("Elemental CLI Examples")
    print("=" * 50)

    examples = [
        (["--list-layouts"], "List all available layouts"),
        (["--layout", "fire", "-W", "12", "-H", "12", "--show-grid", "--verbose"],
         "Wood field burning out from one corner"),
        (["--layout", "sand", "-W", "16", "-H", "10", "--show-grid"],
         "Sand settling to the floor"),
        (["--layout", "empty", "-W", "9", "-H", "9", "--place", "sand:0,4", "--place", "wood:6,4", "--show-grid"],
         "A grain of sand landing on wood"),
        (["--layout", "life", "--max-generations", "200", "--verbose"],
         "Game of Life demo field"),
    ]

    success_count = 0
    for args, description in examples:
        print(f"\nExample: {description}")
        print("-" * len(f"Example: {description}"))
        if run_cli_command(args):
            success_count += 1
        else:
            print("Failed")

    print(f"\nSummary: {success_count}/{len(examples)} examples completed successfully")


if __name__ == "__main__":
    main()
