import os
import time
import random
import requests
from dotenv import load_dotenv

load_dotenv()

API_BASE = os.getenv("API_BASE_URL", "http://localhost:8000").rstrip("/")
INTERVAL = int(os.getenv("INTERVAL_SEC", "5"))
ANALYZE_EVERY = int(os.getenv("ANALYZE_EVERY", "0"))  # 0 = never

INGEST_URL = f"{API_BASE}/api/v1/readings"
ANALYZE_URL = f"{API_BASE}/api/v1/analyze"

t = 0
while True:
    t += 1

    payload = {
        "pH": round(6.5 + random.random(), 2),
        "tds": round(100 + random.random() * 200, 1),
        "turbidity": round(1 + random.random() * 10, 2),
        "temperature": round(20 + random.random() * 10, 2),
        "timestamp": int(time.time() * 1000),
    }

    try:
        r = requests.post(INGEST_URL, json=payload, timeout=10)
        print("ingest:", r.status_code, r.json())

        if ANALYZE_EVERY and t % ANALYZE_EVERY == 0:
            a = requests.post(ANALYZE_URL, json={}, timeout=30).json()
            print("analyze:", a["assessment"]["qualityScore"], a["assessment"]["status"], a.get("newBadges"))
    except Exception as e:
        print("ingest error:", e)

    time.sleep(INTERVAL)
