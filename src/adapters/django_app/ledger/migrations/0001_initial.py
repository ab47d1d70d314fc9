"""
Migration inicial do ledger.

Cria as tabelas:
- account_users: Titulares
- accounts: Contas
- transactions: Ledger de lançamentos
- domain_events: Event Store
"""

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: account_users
        # =================================================================
        migrations.CreateModel(
            name='AccountUserModel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Titular',
                'verbose_name_plural': 'Titulares',
                'db_table': 'account_users',
                'ordering': ['id'],
            },
        ),

        # =================================================================
        # Tabela: accounts
        # =================================================================
        migrations.CreateModel(
            name='AccountModel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('account_number', models.CharField(
                    max_length=20,
                    unique=True,
                    help_text='Número da conta (string numérica)'
                )),
                ('balance', models.PositiveBigIntegerField(default=0)),
                ('status', models.CharField(
                    max_length=20,
                    choices=[('IN_USE', 'Em uso'), ('UNREGISTERED', 'Encerrada')],
                    default='IN_USE',
                    db_index=True,
                )),
                ('registered_at', models.DateTimeField()),
                ('unregistered_at', models.DateTimeField(null=True, blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='accounts',
                    to='ledger.accountusermodel',
                )),
            ],
            options={
                'verbose_name': 'Conta',
                'verbose_name_plural': 'Contas',
                'db_table': 'accounts',
                'ordering': ['id'],
            },
        ),

        # =================================================================
        # Tabela: transactions
        # =================================================================
        migrations.CreateModel(
            name='TransactionModel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transaction_id', models.CharField(
                    max_length=32,
                    unique=True,
                    help_text='Identificador externo (UUID4 hex)'
                )),
                ('transaction_type', models.CharField(
                    max_length=10,
                    choices=[('USE', 'Uso'), ('CANCEL', 'Cancelamento')],
                )),
                ('transaction_result', models.CharField(
                    max_length=10,
                    choices=[('SUCCESS', 'Sucesso'), ('FAIL', 'Falha')],
                )),
                ('amount', models.PositiveBigIntegerField()),
                ('balance_snapshot', models.PositiveBigIntegerField()),
                ('transacted_at', models.DateTimeField(db_index=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('account', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='transactions',
                    to='ledger.accountmodel',
                )),
            ],
            options={
                'verbose_name': 'Transação',
                'verbose_name_plural': 'Transações',
                'db_table': 'transactions',
                'ordering': ['id'],
            },
        ),
        migrations.AddIndex(
            model_name='transactionmodel',
            index=models.Index(fields=['account', 'transacted_at'], name='transactions_acct_at_idx'),
        ),

        # =================================================================
        # Tabela: domain_events (Event Store)
        # =================================================================
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    help_text='UUID único do evento'
                )),
                ('event_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do evento (ex: BalanceUsedEvent)'
                )),
                ('aggregate_type', models.CharField(max_length=100, db_index=True)),
                ('aggregate_id', models.CharField(max_length=36, db_index=True)),
                ('event_data', models.JSONField(default=dict)),
                ('version', models.IntegerField(default=1)),
                ('sequence', models.BigIntegerField(
                    default=0,
                    help_text='Sequência do evento no agregado'
                )),
                ('occurred_at', models.DateTimeField()),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Evento de Domínio',
                'verbose_name_plural': 'Eventos de Domínio',
                'db_table': 'domain_events',
                'ordering': ['recorded_at'],
            },
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(fields=['aggregate_id', 'sequence'], name='domain_events_agg_seq_idx'),
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(fields=['event_type', 'recorded_at'], name='domain_events_type_rec_idx'),
        ),
    ]
