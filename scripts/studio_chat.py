#!/usr/bin/env python3
"""
Interactive prompt console for the Marky Studio API

Type a description and the server generates a marketing image for it. The
result is saved to your gallery and can be written to disk.

Usage:
    python scripts/studio_chat.py --token YOUR_ACCESS_TOKEN [--base-url http://localhost:8000]

Commands:
    /quit, /exit         - Exit
    /history             - List generated images (newest first)
    /delete <id>         - Delete an image from the gallery
    /save <id> <path>    - Write an image to a file
    /type <output type>  - Select an output type (sets the aspect ratio)
    /ratio <value>       - Override the aspect ratio
    /temp <value>        - Set the creativity (temperature)
    /help                - Show available commands
"""

import argparse
import base64
import sys
from typing import Optional

import requests

from app.services.prompt_service import OUTPUT_TYPE_ASPECT_RATIOS as OUTPUT_TYPES


# ANSI color codes for terminal output
class Colors:
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


def print_colored(text: str, color: str = Colors.ENDC):
    print(f"{color}{text}{Colors.ENDC}")


def print_help():
    print_colored("\nAvailable Commands:", Colors.YELLOW)
    print("  /history            - List generated images")
    print("  /delete <id>        - Delete an image")
    print("  /save <id> <path>   - Write an image to a file")
    print(f"  /type <name>        - One of: {', '.join(OUTPUT_TYPES)}")
    print("  /ratio <value>      - Override the aspect ratio (e.g. 4:5)")
    print("  /temp <value>       - Set the temperature (0-2)")
    print("  /quit, /exit        - Exit")
    print()


class StudioClient:
    """Thin REST client for generation and gallery endpoints."""

    def __init__(self, base_url: str, token: str):
        self.base_url = base_url.rstrip('/')
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self.settings = {"temperature": 1.0, "outputType": "General", "aspectRatio": "Auto"}

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/v1{path}"

    def generate(self, prompt: str) -> dict:
        payload = {"prompt": prompt, **self.settings}
        # generation has no client-side timeout either
        response = requests.post(self._url("/generate-image"), headers=self.headers, json=payload)
        if not response.ok:
            body = response.json()
            return {"error": body.get("error") or body.get("detail") or response.text, "details": body.get("details")}
        result = response.json()

        record = {
            "prompt": result["prompt"],
            "imageUrl": result["imageUrl"],
            "textContent": result.get("textContent"),
            "settings": dict(self.settings),
        }
        saved = requests.post(self._url("/images/"), headers=self.headers, json=record, timeout=30)
        if not saved.ok:
            print_colored(f"Warning: image generated but not saved ({saved.status_code})", Colors.YELLOW)
            return record
        return saved.json()

    def history(self) -> list:
        response = requests.get(self._url("/images/"), headers=self.headers, timeout=30)
        response.raise_for_status()
        return response.json()

    def delete(self, image_id: str) -> bool:
        response = requests.delete(self._url(f"/images/{image_id}"), headers=self.headers, timeout=30)
        return response.status_code == 204

    def select_output_type(self, name: str) -> bool:
        if name not in OUTPUT_TYPES:
            return False
        self.settings["outputType"] = name
        self.settings["aspectRatio"] = OUTPUT_TYPES[name]
        return True


def save_image(image: dict, path: str) -> None:
    image_url = image["imageUrl"]
    if image_url.startswith("data:"):
        data = base64.b64decode(image_url.split(",", 1)[1])
    else:
        response = requests.get(image_url, timeout=60)
        response.raise_for_status()
        data = response.content
    with open(path, "wb") as f:
        f.write(data)


def handle_command(client: StudioClient, user_input: str) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    command, _, argument = user_input.partition(" ")
    command = command.lower()
    argument = argument.strip()

    if command in ('/quit', '/exit'):
        print_colored("\nGoodbye!", Colors.CYAN)
        return False
    if command == '/help':
        print_help()
    elif command == '/history':
        images = client.history()
        print_colored(f"\nGallery ({len(images)} images):", Colors.YELLOW)
        for image in images:
            output_type = (image.get("settings") or {}).get("outputType", "General")
            print(f"  {Colors.BLUE}{image['id']}{Colors.ENDC} [{image['timestamp'][:19]}] {output_type}: {image['prompt'][:80]}")
    elif command == '/delete' and argument:
        if client.delete(argument):
            print_colored("Deleted.", Colors.YELLOW)
        else:
            images = client.history()
            print_colored(f"Delete failed; gallery reloaded ({len(images)} images).", Colors.RED)
    elif command == '/save' and argument:
        image_id, _, path = argument.partition(" ")
        image = next((item for item in client.history() if item["id"] == image_id), None)
        if image is None or not path.strip():
            print_colored("Usage: /save <id> <path> (id must be in /history)", Colors.RED)
        else:
            save_image(image, path.strip())
            print_colored(f"Saved to {path.strip()}", Colors.GREEN)
    elif command == '/type' and argument:
        if client.select_output_type(argument):
            print_colored(f"Output type {argument} ({client.settings['aspectRatio']})", Colors.YELLOW)
        else:
            print_colored(f"Unknown output type: {argument}", Colors.RED)
    elif command == '/ratio' and argument:
        client.settings["aspectRatio"] = argument
    elif command == '/temp' and argument:
        try:
            client.settings["temperature"] = float(argument)
        except ValueError:
            print_colored("Temperature must be a number", Colors.RED)
    else:
        print_colored(f"Unknown command: {user_input}. Type /help for available commands.", Colors.RED)
    return True


def run_console(base_url: str, token: str):
    print_colored("\n" + "=" * 60, Colors.CYAN)
    print_colored("   Marky Studio - Image Console", Colors.BOLD + Colors.CYAN)
    print_colored("=" * 60, Colors.CYAN)
    print_colored("Type /help for available commands\n", Colors.DIM)

    client = StudioClient(base_url, token)

    while True:
        try:
            user_input = input(f"{Colors.GREEN}Prompt: {Colors.ENDC}").strip()
            if not user_input:
                continue
            if user_input.startswith('/'):
                if not handle_command(client, user_input):
                    break
                continue

            print_colored("Generating...", Colors.DIM)
            result = client.generate(user_input)
            if "error" in result:
                print_colored(f"\nError: {result['error']}", Colors.RED)
                if result.get("details"):
                    print_colored(f"  {result['details']}", Colors.DIM)
                continue
            print_colored(f"Image ready: {result.get('id', '(not saved)')}", Colors.BLUE)
            if result.get("textContent") and result["textContent"] != user_input:
                print_colored(f"  {result['textContent']}", Colors.DIM)

        except requests.exceptions.RequestException as e:
            print_colored(f"\nRequest failed: {e}", Colors.RED)
        except (KeyboardInterrupt, EOFError):
            print_colored("\n\nGoodbye!", Colors.CYAN)
            break


def validate_connection(base_url: str) -> bool:
    try:
        response = requests.get(f"{base_url.rstrip('/')}/health", timeout=10)
    except requests.exceptions.ConnectionError:
        print_colored(f"Error: Cannot connect to {base_url}", Colors.RED)
        print_colored("Make sure the server is running", Colors.YELLOW)
        return False
    except requests.exceptions.Timeout:
        print_colored("Error: Connection timed out", Colors.RED)
        return False
    return response.ok


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Interactive image console for the Marky Studio API")
    parser.add_argument("--token", "-t", required=True, help="Access token from the auth provider")
    parser.add_argument("--base-url", "-u", default="http://localhost:8000",
                        help="Base URL of the API (default: http://localhost:8000)")
    args = parser.parse_args(argv)

    if not validate_connection(args.base_url):
        sys.exit(1)
    run_console(args.base_url, args.token)


if __name__ == "__main__":
    main()
