"""
client.py - interactive demo client

Usage:
  python client.py --base http://localhost:8080

Reads a long URL from stdin, POSTs it gzip-compressed as text/plain to the
server root, and prints the status line and the short link from the answer.
"""
import argparse
import gzip

import httpx

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://localhost:8080")
    args = parser.parse_args()

    print("Type long URL")
    long_url = input().strip()

    headers = {
        "Content-Type": "text/plain",
        "Content-Encoding": "gzip",
        "Accept-Encoding": "gzip",
    }
    # httpx gunzips the response body on its own when the server compresses it.
    response = httpx.post(f"{args.base}/", content=gzip.compress(long_url.encode("utf-8")), headers=headers)

    print("Status", response.status_code, response.reason_phrase)
    print(response.text)

if __name__ == "__main__":
    main()
