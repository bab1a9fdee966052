#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife - точка входа
Запуск дашборда и служебные команды над данными владельца

Версия: 1.0.0
"""

import argparse
import asyncio
import logging
import sys

from config import config, setup_logging
from database import StoreError, create_store
from services.habit_service import apply_template, set_modules

logger = logging.getLogger(__name__)


async def _seed(owner: str, nutrition: bool, sleep: bool) -> None:
    """Шаблон привычек и включение модулей для владельца"""
    store = create_store(config)
    try:
        added = await apply_template(store, owner)
        logger.info(f"📋 Добавлено привычек из шаблона: {len(added)}")
        if nutrition or sleep:
            settings = await set_modules(store, owner, nutrition=nutrition or None, sleep=sleep or None)
            logger.info(f"⚙️ Модули: питание={settings.nutrition_enabled}, сон={settings.sleep_enabled}")
    finally:
        store.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="HabitLife")
    sub = parser.add_subparsers(dest="command")

    web = sub.add_parser("dashboard", help="Запустить веб-дашборд")
    web.add_argument("--host", type=str, default=None)
    web.add_argument("--port", type=int, default=None)

    seed = sub.add_parser("template", help="Добавить шаблонные привычки владельцу")
    seed.add_argument("owner", type=str)
    seed.add_argument("--nutrition", action="store_true", help="Включить модуль питания")
    seed.add_argument("--sleep", action="store_true", help="Включить модуль сна")

    args = parser.parse_args(argv)

    config.ensure_directories()
    setup_logging(config)

    if args.command == "template":
        try:
            asyncio.run(_seed(args.owner, args.nutrition, args.sleep))
        except StoreError as e:
            logger.error(f"❌ Ошибка хранилища: {e}")
            return 1
        return 0

    from dashboard.app import run_dashboard

    logger.info(f"🚀 Запуск {config.APP_NAME} v{config.VERSION} ({config.ENVIRONMENT.value})")
    run_dashboard(args.host if args.command else None, args.port if args.command else None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
