#!/usr/bin/env python3
"""
Workspace Collaboration Terminal Client
Usage: python workspace_client.py <workspace_id> [display_name]
"""

import asyncio
import websockets
import json
import sys
from typing import Any, Dict, Optional

from collab.events import room_id_for_workspace


def format_event(data: Dict[str, Any]) -> str:
    """Render one server event as a single terminal line."""
    event_type = data.get("type")
    peer = data.get("connectionId", "?")

    if event_type == "connected":
        return f"✅ Connected as {peer}"
    elif event_type == "user-joined":
        return f"👋 {data.get('displayName') or 'Anonymous'} ({peer}) joined"
    elif event_type == "user-left":
        return f"🚪 {peer} left"
    elif event_type == "cursor-update":
        cursor = data.get("cursor")
        where = f"at {cursor}" if cursor is not None else "hidden"
        return f"🖱️ {data.get('username') or data.get('displayName') or peer} cursor {where}"
    elif event_type == "code-update":
        code = data.get("code") or ""
        first_line = code.split('\n')[0]
        if len(first_line) > 60:
            first_line = first_line[:60] + "..."
        return f"📝 {peer} updated code: {first_line}"
    elif event_type in ("file-created", "file-deleted", "file-selected"):
        target = data.get("file") or data.get("fileId")
        return f"📁 {peer} {event_type.split('-')[1]} {target}"
    elif event_type == "error":
        return f"❌ Error: {data.get('message', '')}"
    return f"📨 {event_type or 'unknown'}: {str(data)[:100]}"


def parse_command(line: str, room_id: str, display_name: str) -> Optional[Dict[str, Any]]:
    """Turn a typed command into an outbound event, or None if not recognised."""
    parts = line.strip().split(maxsplit=1)
    if not parts:
        return None
    command, arg = parts[0].lower(), (parts[1] if len(parts) > 1 else "")

    if command == "/cursor":
        try:
            x, y = (int(v) for v in arg.split())
        except ValueError:
            return None
        return {"type": "cursor-update", "roomId": room_id, "cursor": {"x": x, "y": y}, "username": display_name}
    elif command == "/hide":
        return {"type": "cursor-update", "roomId": room_id, "cursor": None, "username": display_name}
    elif command == "/select" and arg:
        return {"type": "file-selected", "roomId": room_id, "fileId": arg}
    elif command == "/leave":
        return {"type": "leave-room", "roomId": room_id}
    elif command == "/join":
        return {"type": "join-room", "roomId": room_id, "username": display_name}
    elif not command.startswith("/"):
        return {"type": "code-update", "roomId": room_id, "code": line.strip()}
    return None


class WorkspaceClient:
    def __init__(self, workspace_id, display_name="Anonymous", server_url="ws://localhost:5000/ws/collab"):
        self.server_url = server_url
        self.room_id = room_id_for_workspace(workspace_id)
        self.display_name = display_name
        self.websocket = None

    async def connect(self):
        """Connect to the server and join the workspace room"""
        try:
            self.websocket = await websockets.connect(self.server_url)
        except Exception as e:
            print(f"❌ Connection failed: {e}")
            return False
        await self.send(parse_command("/join", self.room_id, self.display_name))
        return True

    async def send(self, event):
        if not self.websocket:
            print("❌ Not connected")
            return
        await self.websocket.send(json.dumps(event))

    async def listen(self):
        """Print events from room peers until the connection closes"""
        try:
            async for raw in self.websocket:
                print(format_event(json.loads(raw)))
        except websockets.exceptions.ConnectionClosed:
            print("\n🔌 Connection closed by server")

    async def close(self):
        """Close the connection"""
        if self.websocket:
            await self.websocket.close()
            self.websocket = None
            print("👋 Disconnected")


async def main(workspace_id, display_name):
    """Main interactive loop"""
    client = WorkspaceClient(workspace_id, display_name)

    print(f"🚀 Workspace {workspace_id} as {display_name}")
    print("=" * 50)
    print("Commands:")
    print("  /cursor X Y  - Move your cursor")
    print("  /hide        - Hide your cursor")
    print("  /select ID   - Select a file")
    print("  /leave, /join")
    print("  /quit        - Exit")
    print("  anything else - Send as code update")
    print("=" * 50)

    if not await client.connect():
        return

    listener_task = asyncio.create_task(client.listen())

    try:
        while True:
            try:
                line = await asyncio.get_event_loop().run_in_executor(None, lambda: input())
            except (KeyboardInterrupt, EOFError):
                break
            if line.strip().lower() in ['/quit', '/exit']:
                break
            event = parse_command(line, client.room_id, client.display_name)
            if event is None:
                if line.strip():
                    print("⚠️ Unknown command")
                continue
            await client.send(event)
    finally:
        listener_task.cancel()
        await client.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__.strip())
        sys.exit(1)
    try:
        asyncio.run(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else "Anonymous"))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
