import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"

SENDER = {"name": "Persist Sender", "mobile": "9000000101", "password": "securePassword123"}
RECIPIENT = {"name": "Persist Recipient", "mobile": "9000000102", "password": "securePassword123"}


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        except Exception as e:
            print(f"Connect error: {e}")
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def start_server(echo=False):
    env = {**os.environ, "DB_ECHO": "True"} if echo else None
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "backend.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def login(account):
    resp = httpx.post(f"{BASE_URL}/login", json={"mobile": account["mobile"], "password": account["password"]})
    if resp.status_code != 200:
        raise Exception(f"Login failed for {account['mobile']}: {resp.status_code} {resp.text}")
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def balance(headers):
    resp = httpx.get(f"{BASE_URL}/profile/balance", headers=headers)
    if resp.status_code != 200:
        raise Exception(f"Balance lookup failed: {resp.status_code} {resp.text}")
    return resp.json()["balance"]


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server(echo=True)
    
    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Register both accounts
        print("\n--- [Step 2] Registering Accounts ---")
        for account in (SENDER, RECIPIENT):
            resp = httpx.post(f"{BASE_URL}/register", json=account)
            if resp.status_code == 409:
                print(f"⚠️ {account['mobile']} already exists (persistence working from previous run?)")
            elif resp.status_code == 201:
                print(f"✅ Registered {account['mobile']}")
            else:
                print(f"❌ Registration Failed: {resp.status_code} {resp.text}")
                raise Exception("Registration failed")

        # 3. Transfer
        print("\n--- [Step 3] Internal Transfer ---")
        headers = login(SENDER)
        before = balance(headers)
        resp = httpx.post(
            f"{BASE_URL}/transfer-internal",
            json={"recipient_mobile": RECIPIENT["mobile"], "amount": "1.00"},
            headers=headers
        )
        if resp.status_code != 200:
            raise Exception(f"Transfer failed: {resp.status_code} {resp.text}")
        expected = resp.json()["new_balance"]
        print(f"✅ Transfer committed: {before} -> {expected}")

    finally:
        print("\n--- [Step 4] Stopping Server ---")
        stop_server(proc)
    
    time.sleep(2) # Wait for port release

    # 4. Restart Server
    print("\n--- [Step 5] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        # 5. Login and check the balance survived
        print("\n--- [Step 6] Verifying Balance (Post-Restart) ---")
        after = balance(login(SENDER))
        if after == expected:
            print(f"✅ Balance persisted: {after}")
        else:
            print(f"❌ Balance mismatch after restart: expected {expected}, got {after}")
            raise Exception("Balance not persisted")

    finally:
        print("\n--- [Step 7] Stopping Server ---")
        stop_server(proc2)

if __name__ == "__main__":
    run_verification()
