"""Command-line interface for Vakit-Period."""

import argparse
import sys
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

from vakit_period import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="vakit-period",
        description="Namaz vakti periyot durumu ve geçiş zamanlayıcısı",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"vakit-period {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Komutlar")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Web sunucusunu başlat")
    serve_parser.add_argument(
        "--host",
        "-H",
        default=None,
        help="Sunucu adresi (varsayılan: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Sunucu portu (varsayılan: 8080)",
    )
    serve_parser.add_argument(
        "--settings",
        "-s",
        type=Path,
        help="Ayar dosyası yolu",
    )
    serve_parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log seviyesi (varsayılan: INFO)",
    )
    serve_parser.add_argument(
        "--strict",
        action="store_true",
        help="Tutarsız vakit verisinde hata ver",
    )

    # times command
    times_parser = subparsers.add_parser("times", help="Namaz vakitlerini göster")
    _add_location_arguments(times_parser)
    times_parser.add_argument(
        "--days",
        "-d",
        type=int,
        default=1,
        help="Kaç günlük (varsayılan: 1)",
    )

    # period command
    period_parser = subparsers.add_parser("period", help="Mevcut periyot durumunu göster")
    _add_location_arguments(period_parser)
    period_parser.add_argument(
        "--at",
        type=datetime.fromisoformat,
        help="Değerlendirilecek an (ISO 8601, varsayılan: şimdi)",
    )

    return parser


def _add_location_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", type=float, required=True, help="Enlem")
    parser.add_argument("--lng", type=float, required=True, help="Boylam")
    parser.add_argument(
        "--method",
        type=int,
        default=2,
        help="İmsak/yatsı hesaplama metodu (varsayılan: 2, Diyanet)",
    )
    parser.add_argument(
        "--asr-fiqh",
        type=int,
        default=1,
        help="İkindi mezhebi (0=Şafi, 1=Hanefi)",
    )


def _create_service(args: argparse.Namespace):
    from vakit_period.domain.models import Location
    from vakit_period.services.prayer_service import PrayerService

    location = Location(latitude=args.lat, longitude=args.lng)
    return PrayerService(location, fajr_isha_method=args.method, asr_fiqh=args.asr_fiqh)


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the web server."""
    import uvicorn

    from vakit_period.api.app import create_app
    from vakit_period.config import get_config, setup_logging

    config = get_config()
    overrides = {
        "host": args.host,
        "port": args.port,
        "settings_path": args.settings,
        "log_level": args.log_level,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    if args.strict:
        config = replace(config, strict_validation=True)

    setup_logging(config.log_level)

    app = create_app(config)

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


def cmd_times(args: argparse.Namespace) -> None:
    """Show prayer times."""
    service = _create_service(args)

    now = service.now()
    times_list = service.calculate_range(now.date(), args.days)

    print(f"\n📍 Konum: {args.lat:.4f}, {args.lng:.4f}")
    print(f"🌍 Timezone: {service.timezone_name}")
    print()

    print("=" * 84)
    print(
        f"{'Tarih':<12} {'İmsak':>8} {'Sabah':>8} {'Güneş':>8} {'Öğle':>8} "
        f"{'İkindi':>8} {'Akşam':>8} {'Yatsı':>8}"
    )
    print("-" * 84)

    for times in times_list:
        imsak = times.imsak.strftime("%H:%M") if times.imsak else "--:--"
        print(
            f"{times.date.strftime('%d.%m.%Y'):<12} "
            f"{imsak:>8} "
            f"{times.fajr.strftime('%H:%M'):>8} "
            f"{times.sunrise.strftime('%H:%M'):>8} "
            f"{times.dhuhr.strftime('%H:%M'):>8} "
            f"{times.asr.strftime('%H:%M'):>8} "
            f"{times.maghrib.strftime('%H:%M'):>8} "
            f"{times.isha.strftime('%H:%M'):>8}"
        )

    print("=" * 84)


def cmd_period(args: argparse.Namespace) -> None:
    """Show the current prayer period."""
    from vakit_period.domain.period import calculate_period, governing_day

    service = _create_service(args)

    now = args.at or service.now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=service.timezone)

    # Sabah vaktinden önce dünün gecesi (yatsı veya yatsı sonrası) sürüyor olabilir
    today = service.calculate(now.date())
    yesterday = service.calculate(now.date() - timedelta(days=1)) if now < today.fajr else None
    today = governing_day(now, today, yesterday)
    tomorrow = service.calculate(today.date + timedelta(days=1))

    period = calculate_period(now, today, tomorrow)
    next_prayer = period.next_prayer

    print(f"\n🕐 Zaman: {now.strftime('%Y-%m-%d %H:%M:%S %Z')}")
    print(f"📌 Durum: {period.state.description}")
    if next_prayer is not None:
        print(
            f"{next_prayer.name.icon} Sıradaki: {next_prayer.name.display_name} "
            f"({next_prayer.time_str})"
        )
    print(f"⏳ {period.status_text()}")
    print(f"📊 İlerleme: {period.period_progress():.0%}")
    print(f"🚦 Aciliyet: {period.urgency().description}")


def main() -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        # Varsayılan olarak serve çalıştır
        args = parser.parse_args(["serve"])

    commands = {
        "serve": cmd_serve,
        "times": cmd_times,
        "period": cmd_period,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        cmd_func(args)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
