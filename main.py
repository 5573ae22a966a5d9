"""
Data Science Salary Visual Analytics
Summary dashboard and interactive explorer over ds_salaries.csv
"""

import argparse

from salary_viz import explorer_app, summary_app
from salary_viz.config import get_settings
from salary_viz.logging_config import setup_logging

APPS = {
    'summary': summary_app.create_app,
    'explorer': explorer_app.create_app,
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Serve a salary dashboard.")
    parser.add_argument('app', nargs='?', choices=sorted(APPS), default='explorer',
                        help="dashboard to serve (default: explorer)")
    parser.add_argument('--data', dest='data_path', help="path to ds_salaries.csv")
    parser.add_argument('--host')
    parser.add_argument('--port', type=int)
    parser.add_argument('--debug', action='store_true', default=None)
    parser.add_argument('--log-level', default='INFO')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    settings = get_settings(data_path=args.data_path, host=args.host,
                            port=args.port, debug=args.debug)
    app = APPS[args.app](settings)

    print("\n" + "=" * 72)
    print(f"DATA SCIENCE SALARIES - {args.app.upper()} DASHBOARD")
    print("=" * 72)
    print(f"Data:      {settings.data_path}")
    print(f"Dashboard: http://{settings.host}:{settings.port}")
    print("=" * 72 + "\n")

    app.run(host=settings.host, port=settings.port, debug=settings.debug)


# ============================================
# RUN
# ============================================

if __name__ == '__main__':
    main()
