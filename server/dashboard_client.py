#!/usr/bin/env python3
"""
Terminal dashboard for the device telemetry API
"""
import argparse
import asyncio
import sys

from client.context import DeviceDataContext, RejectedReading
from config.settings import API_URL


def print_dashboard(context: DeviceDataContext):
    """Print the current device table"""
    updated = context.last_updated.strftime("%H:%M:%S") if context.last_updated else "-"
    print(f"\n📡 Devices (last updated {updated})")
    if context.error:
        print(f"⚠️  {context.error} - showing simulated data")
    if not context.device_data:
        print("   No devices")
        return

    for reading in sorted(context.device_data, key=lambda r: r.device_id):
        history = context.get_device_history(reading.device_id)
        trend = " ".join(f"{h['temperature']:.1f}" for h in reversed(history))
        print(
            f"   {reading.device_id:<12} {reading.temperature:5.1f} °C  {reading.humidity:5.1f} %"
            f"   [{trend}]"
        )


async def watch(url: str):
    context = DeviceDataContext(url, on_update=print_dashboard)
    print(f"🔌 Polling {url}...")
    print("💡 Press Ctrl+C to stop\n")
    async with context:
        while True:
            await asyncio.sleep(3600)


async def add(url: str, device_id: str, temperature: float, humidity: float) -> int:
    context = DeviceDataContext(url)
    try:
        reading = await context.add_device_data(device_id, temperature, humidity)
    except RejectedReading as e:
        print(f"❌ Rejected: {e}")
        return 1
    finally:
        await context.stop()

    suffix = " (local only)" if context.error else ""
    print(f"✅ Saved {reading.device_id}: {reading.temperature} °C, {reading.humidity} %{suffix}")
    return 0


async def delete(url: str, device_id: str) -> int:
    context = DeviceDataContext(url)
    try:
        result = await context.delete_device(device_id)
    finally:
        await context.stop()

    if not result.get("success"):
        print(f"❌ {result.get('message')}")
        return 1
    print(f"✅ {result.get('message')} ({result.get('deletedCount')} records)")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Terminal dashboard for the device telemetry API"
    )
    parser.add_argument(
        "--url", "-u",
        type=str,
        default=API_URL,
        help=f"Device data API URL (default: {API_URL})"
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("watch", help="Poll the API and print device data (default)")

    add_parser = subparsers.add_parser("add", help="Send a reading")
    add_parser.add_argument("device_id")
    add_parser.add_argument("temperature", type=float)
    add_parser.add_argument("humidity", type=float)

    delete_parser = subparsers.add_parser("delete", help="Delete a device and all its data")
    delete_parser.add_argument("device_id")

    args = parser.parse_args()

    if not args.url.startswith(("http://", "https://")):
        print("⚠️  URL must start with http:// or https://")
        print(f"   You provided: {args.url}")
        sys.exit(1)

    try:
        if args.command == "add":
            sys.exit(asyncio.run(add(args.url, args.device_id, args.temperature, args.humidity)))
        elif args.command == "delete":
            sys.exit(asyncio.run(delete(args.url, args.device_id)))
        else:
            asyncio.run(watch(args.url))
    except KeyboardInterrupt:
        print("\n✅ Shutdown complete")


if __name__ == "__main__":
    main()
