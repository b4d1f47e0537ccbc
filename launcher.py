#!/usr/bin/env python3
"""
Simple launcher script for deployment.
This executes the dashboard app as a module from the project root.
"""

import sys
import os
import subprocess

if __name__ == "__main__":
    # Get port from environment (the platform sets this automatically)
    port = os.environ.get('PORT', '3001')
    host = os.environ.get('HOST', '0.0.0.0')

    # Set environment variables for the Flask app
    os.environ['PORT'] = port
    os.environ['HOST'] = host
    os.environ['FLASK_ENV'] = 'production'

    # Run from the directory holding the sfmc_dashboard package
    project_root = os.path.dirname(os.path.abspath(__file__))

    result = subprocess.run([sys.executable, '-m', 'sfmc_dashboard.app'],
                            cwd=project_root,
                            env=os.environ)

    sys.exit(result.returncode)
