#!/usr/bin/env python
"""
Setup rápido do ledger para desenvolvimento local.

Este script:
1. Configura Django com SQLite
2. Executa migrations
3. Cadastra usuários e contas de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
    python scripts/quick_setup.py --check-only
"""

import os
import sys
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

SAMPLE_USERS = [
    # (nome, saldos iniciais das contas)
    ('Pobi', [10_000, 0]),
    ('Woni', [50_000]),
    ('Jun', [1_000]),
]


def setup_django():
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')
    os.environ.setdefault('DATABASE_URL', 'sqlite:///db.sqlite3')
    os.environ.setdefault('EVENT_PUBLISHER_MODE', 'sync')

    import django
    django.setup()


def run_migrations():
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_sample_data():
    """Cadastra usuários e abre contas pelo próprio use case."""
    from src.adapters.django_app.ledger.models import AccountUserModel
    from src.config.container import get_container
    from src.core.accounts.dtos import CreateAccountInputDTO

    service = get_container().create_account_service()

    print("📝 Criando usuários e contas de exemplo...")

    for name, balances in SAMPLE_USERS:
        user, _ = AccountUserModel.objects.get_or_create(name=name)
        for balance in balances:
            output = service.execute(
                CreateAccountInputDTO(user_id=user.pk, initial_balance=balance)
            )
            print(f"   ✓ {name} (user_id={user.pk}): conta {output.account_number} "
                  f"com saldo {output.balance}")

    print("✅ Dados de exemplo criados!")


def check_connection() -> bool:
    from src.adapters.django_app.shared.database import check_database_connection

    print("🔍 Verificando conexão com o banco...")
    result = check_database_connection()
    if result['healthy']:
        print(f"✅ Conexão OK! ({result['engine']})")
    else:
        print(f"❌ Erro de conexão: {result['error']}")
    return result['healthy']


def show_info():
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Limite de contas por usuário: {settings.LEDGER_MAX_ACCOUNTS_PER_USER}")
    print(f"  Event publisher: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. python manage.py runserver")
    print("   2. Acesse: http://localhost:8000/ledger/api/accounts/?user_id=1")
    print("   3. Acesse: http://localhost:8000/health/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido do ledger')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Cadastrar usuários e contas de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Account Ledger - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        print("   Para usar SQLite, defina: DATABASE_URL=sqlite:///db.sqlite3")
        return

    if args.check_only:
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
