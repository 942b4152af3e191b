#!/usr/bin/env python3
"""Drive a running server through whole games. Start it with SKETCHVERSE_AUTO_ADVANCE=0."""
import json
import sys
from urllib import request, error

BASE_URL = "http://127.0.0.1:8000"


def api(method, path, body=None):
    url = BASE_URL + path
    data = None
    headers = {}
    if body is not None:
        data = json.dumps(body).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = request.Request(url, data=data, headers=headers, method=method)
    try:
        with request.urlopen(req, timeout=10) as resp:
            payload = resp.read().decode("utf-8")
            return resp.status, json.loads(payload) if payload else None
    except error.HTTPError as e:
        payload = e.read().decode("utf-8")
        try:
            return e.code, json.loads(payload)
        except ValueError:
            return e.code, {"detail": payload}
    except OSError as e:
        return 0, {"detail": str(e)}


def must_ok(status, data, label):
    if status < 200 or status >= 300:
        raise RuntimeError(f"{label} failed: {status} {data}")
    return data


def print_case(label):
    print(f"\n=== {label} ===")


def reset_and_seed(count, start_game=True):
    status, data = api(
        "POST",
        "/api/debug/reset_and_seed",
        {"player_count": count, "start_game": start_game},
    )
    return must_ok(status, data, "reset_and_seed")


def fetch_game(code, viewer_id=None):
    path = f"/api/games/{code}"
    if viewer_id:
        path += f"?viewer_id={viewer_id}"
    status, data = api("GET", path)
    return must_ok(status, data, "game")


def set_word(code, word):
    status, data = api("POST", "/api/debug/set_turn", {"room_code": code, "word": word})
    return must_ok(status, data, "set_turn")


def guess(code, player_id, text, turn_no=None):
    status, data = api(
        "POST",
        f"/api/games/{code}/guess",
        {"player_id": player_id, "text": text, "turn_no": turn_no},
    )
    return must_ok(status, data, "guess")


def advance(code, player_id, expected_turn=None):
    status, data = api(
        "POST",
        f"/api/games/{code}/advance",
        {"player_id": player_id, "expected_turn": expected_turn},
    )
    return must_ok(status, data, "advance")


def standings(code):
    status, data = api("GET", f"/api/rooms/{code}/standings")
    return must_ok(status, data, "standings")


def case_full_game_all_guess(count):
    print_case("full game, everyone guesses")
    seeded = reset_and_seed(count)
    code = seeded["room_code"]
    ids = [p["id"] for p in seeded["players"]]

    game = fetch_game(code)
    turns_played = 0
    while game["status"] == "playing":
        drawer = game["current_drawer_id"]
        set_word(code, "Star")

        wrong = guess(code, drawer, "star")
        if wrong["applied"]:
            raise RuntimeError("drawer guess was accepted")

        for pid in ids:
            if pid == drawer:
                continue
            res = guess(code, pid, "STAR", turn_no=game["turn_no"])
            if not res["correct"]:
                raise RuntimeError(f"expected correct guess: {res}")
        if not res["turn_advanced"]:
            raise RuntimeError("turn did not advance after everyone guessed")
        turns_played += 1
        game = res["game"]

    if turns_played != count * game["total_rounds"]:
        raise RuntimeError(f"expected {count * game['total_rounds']} turns, played {turns_played}")
    if game["round"] != game["total_rounds"] + 1:
        raise RuntimeError(f"unexpected final round {game['round']}")

    table = standings(code)
    scores = [p["score"] for p in table["players"]]
    print(f"winner={table['winner']['name']} scores={scores}")
    print("full game ok")


def case_host_only_advance(count):
    print_case("host only advance")
    seeded = reset_and_seed(count)
    code = seeded["room_code"]
    host = seeded["players"][0]["id"]
    other = seeded["players"][1]["id"]

    res = advance(code, other)
    if res["applied"] or res["reason"] != "not_host":
        raise RuntimeError(f"non-host advanced the turn: {res}")

    turn_no = fetch_game(code)["turn_no"]
    first = advance(code, host, expected_turn=turn_no)
    second = advance(code, host, expected_turn=turn_no)
    if not first["applied"] or second["applied"]:
        raise RuntimeError("same turn advanced twice")
    print("host only advance ok")


def case_room_full(count):
    print_case("room full")
    seeded = reset_and_seed(count, start_game=False)
    code = seeded["room_code"]
    status, data = api("POST", f"/api/rooms/{code}/join", {"player_id": "late-comer"})
    if count >= 5:
        if status != 409:
            raise RuntimeError(f"expected 409 for full room, got {status} {data}")
    else:
        must_ok(status, data, "join")
    print("room full ok")


def main():
    for count in range(2, 6):
        print(f"\n######## players={count} ########")
        case_full_game_all_guess(count)
        case_host_only_advance(count)
        case_room_full(count)

    print("\nALL OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
