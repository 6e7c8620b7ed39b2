"""
Minimal Python client for the public result checker.
Requires: pip install requests
Usage:
  python client_example.py --host http://127.0.0.1:8000 --school DEMO --admission DEMO2025001 \
      --session 2024/2025 --term First --pin ABCDEFGH1234
"""

import argparse
import json

import requests


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="http://127.0.0.1:8000")
    parser.add_argument("--school", required=True, help="School code")
    parser.add_argument("--admission", required=True, help="Student admission number")
    parser.add_argument("--session", required=True)
    parser.add_argument("--term", choices=["First", "Second", "Third"], default="First")
    parser.add_argument("--pin", required=True)
    parser.add_argument("--output", help="Write the result JSON to this file")
    args = parser.parse_args()

    resp = requests.post(
        f"{args.host}/api/public/check-result/",
        json={
            "school_code": args.school,
            "admission_number": args.admission,
            "session": args.session,
            "term": args.term,
            "pin": args.pin,
        },
        timeout=10,
    )
    payload = resp.json()
    if resp.status_code != 200:
        # e.g. pin_already_used carries used_by
        print(f"Check failed ({resp.status_code}): {payload.get('code')} - {payload.get('message')}")
        if payload.get("used_by"):
            print(f"Used by: {payload['used_by']}")
        return

    result = payload["data"]
    print(f"{result['student_name']} ({result['admission_number']}) - {result['session']} {result['term']} term")
    for subject in result["subjects"]:
        print(f"  {subject['subject_name']:<24} {subject['total']:>6}  {subject['grade']}  {subject['remark']}")
    print(f"Total: {result['total_score']}  Average: {result['average_score']}")

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result, f, indent=2)
        print(f"Result written to {args.output}")


if __name__ == "__main__":
    main()
