#!/usr/bin/env python3
"""Development setup script for the Stock Predictor plugin."""

import subprocess
import sys


def run_command(command, description):
    """Run a command and handle errors."""
    print(f"Running: {description}")
    try:
        subprocess.run(command, check=True, shell=True, capture_output=True, text=True)
        print(f"✓ {description} completed successfully")
        return True
    except subprocess.CalledProcessError as e:
        print(f"✗ {description} failed: {e}")
        if e.stdout:
            print(f"stdout: {e.stdout}")
        if e.stderr:
            print(f"stderr: {e.stderr}")
        return False


def main():
    """Main setup function."""
    print("Stock Predictor - Development Setup")
    print("=" * 50)

    if sys.version_info < (3, 8):
        print("Error: Python 3.8 or higher is required")
        sys.exit(1)

    print(f"✓ Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro} detected")

    if not run_command(f"{sys.executable} -m pip install -e .[test]", "Installing package and test dependencies"):
        print("Failed to install dependencies. Please check your pip installation.")
        return False

    if not run_command(f"{sys.executable} -m pytest tests/ -v", "Running test suite"):
        print("Some tests failed. Please review the output above.")
        return False

    print("\n" + "=" * 50)
    print("✓ Development environment setup complete!")
    print("\nNext steps:")
    print("1. Install the plugin in QGIS by copying the 'stock_predictor' folder to your QGIS plugins directory")
    print("2. Enable the plugin in QGIS: Plugins > Manage and Install Plugins")
    print("3. Open Plugins > Stock Predictor > Stock Price Predictor")

    return True


if __name__ == "__main__":
    main()
