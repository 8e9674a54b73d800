import argparse
import os
import signal
import subprocess
import sys
import time
import webbrowser
import atexit

_processes = []


def cleanup():
    for proc in _processes:
        if proc.poll() is None:
            try:
                if sys.platform == "win32":
                    subprocess.run(
                        ["taskkill", "/F", "/T", "/PID", str(proc.pid)],
                        capture_output=True
                    )
                else:
                    proc.terminate()
                    proc.wait(timeout=5)
            except (OSError, subprocess.TimeoutExpired):
                proc.kill()


def signal_handler(signum, frame):
    print("\n\nShutting down...")
    cleanup()
    sys.exit(0)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the seller dashboard")
    parser.add_argument("--port", type=int, default=8501)
    parser.add_argument("--api-url", help="Backend base URL (default: SELLER_DASHBOARD_API_BASE_URL)")
    parser.add_argument("--no-browser", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    print("\nStarting Seller Dashboard...\n")

    atexit.register(cleanup)
    signal.signal(signal.SIGINT, signal_handler)
    if sys.platform != "win32":
        signal.signal(signal.SIGTERM, signal_handler)

    root = os.path.dirname(os.path.abspath(__file__))
    script = os.path.join(root, "seller_dashboard", "app.py")

    env = dict(os.environ)
    if args.api_url:
        env["SELLER_DASHBOARD_API_BASE_URL"] = args.api_url

    dashboard = subprocess.Popen(
        [sys.executable, "-m", "streamlit", "run", script,
         "--server.headless", "true", "--server.port", str(args.port)],
        cwd=root,
        env=env,
    )
    _processes.append(dashboard)

    url = f"http://localhost:{args.port}"
    print(f"Dashboard: {url}")
    print("\nPress Ctrl+C to stop\n")

    if not args.no_browser:
        time.sleep(2)
        webbrowser.open(url)

    try:
        while dashboard.poll() is None:
            time.sleep(1)
        print("Dashboard stopped unexpectedly")
    except KeyboardInterrupt:
        pass
    finally:
        cleanup()


if __name__ == "__main__":
    main()
