"""
Management command to create sample data for trying the POS API.

Usage:
    python manage.py create_sample_data

This creates:
- 3 operators (owner, admin, kasir)
- A small café menu with variants and add-ons
- One discount of each type (order, product, combo)
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal

from apps.accounts.models import User, UserRole
from apps.catalog.models import Category, Product, ProductVariant, ProductExtra
from apps.discounts.models import Discount
from apps.discounts.services import create_discount


class Command(BaseCommand):
    help = 'Create sample operators, menu and discounts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing menu and discounts before creating sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        self.create_users()
        products = self.create_menu()
        self.create_discounts(products)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Operator accounts:')
        self.stdout.write('  owner / owner123 (superadmin)')
        self.stdout.write('  admin / admin123 (admin)')
        self.stdout.write('  kasir / kasir123 (staf)')

    def clear_data(self):
        """Remove discounts and the menu; sales history is kept."""
        Discount.objects.all().delete()
        ProductExtra.objects.all().delete()
        ProductVariant.objects.all().delete()
        Product.objects.filter(transaction_items__isnull=True).delete()

    def create_users(self):
        self.stdout.write('  Creating operators...')

        accounts = [
            ('owner', 'Owner', UserRole.SUPERADMIN, 'owner123'),
            ('admin', 'Store Admin', UserRole.ADMIN, 'admin123'),
            ('kasir', 'Kasir Pagi', UserRole.STAF, 'kasir123'),
        ]
        for username, name, role, password in accounts:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'name': name,
                    'role': role,
                    'is_staff': role == UserRole.SUPERADMIN,
                    'is_superuser': role == UserRole.SUPERADMIN,
                }
            )
            if created:
                user.set_password(password)
                user.save()

    def create_menu(self):
        """Create categories and products with variants and add-ons."""
        self.stdout.write('  Creating menu...')

        coffee, _ = Category.objects.get_or_create(name='Coffee')
        pastry, _ = Category.objects.get_or_create(name='Pastry')

        menu = [
            {
                'name': 'Kopi Susu',
                'category': coffee,
                'price': Decimal('20000'),
                'cost': Decimal('8000'),
                'variants': ['Size::Regular', 'Size::Large', 'Ice::Less', 'Ice::Normal'],
                'extras': [('Extra Shot', Decimal('5000')), ('Oat Milk', Decimal('7000'))],
            },
            {
                'name': 'Americano',
                'category': coffee,
                'price': Decimal('18000'),
                'cost': Decimal('6000'),
                'variants': ['Hot', 'Iced'],
                'extras': [('Extra Shot', Decimal('5000'))],
            },
            {
                'name': 'Croissant',
                'category': pastry,
                'price': Decimal('25000'),
                'cost': Decimal('12000'),
                'variants': [],
                'extras': [('Butter', Decimal('3000'))],
            },
            {
                'name': 'Cheesecake',
                'category': pastry,
                'price': Decimal('35000'),
                'cost': Decimal('15000'),
                'variants': [],
                'extras': [],
            },
        ]

        products = {}
        for item in menu:
            product, created = Product.objects.get_or_create(
                name=item['name'],
                defaults={
                    'category': item['category'],
                    'price': item['price'],
                    'cost': item['cost'],
                }
            )
            if created:
                for variant_name in item['variants']:
                    ProductVariant.objects.create(product=product, name=variant_name)
                for extra_name, price in item['extras']:
                    ProductExtra.objects.create(product=product, name=extra_name, price=price)
            products[item['name']] = product

        return products

    def create_discounts(self, products):
        """Create one discount of each type through the service rules."""
        self.stdout.write('  Creating discounts...')

        discounts = [
            {
                'name': 'Weekday 10%',
                'code': 'HEMAT10',
                'discount_type': 'order',
                'value': Decimal('10'),
                'value_type': 'percent',
                'min_purchase': Decimal('50000'),
                'max_discount': Decimal('25000'),
            },
            {
                'name': 'Kopi Susu Buy 2',
                'code': 'KOPI2',
                'discount_type': 'product',
                'value': Decimal('5000'),
                'value_type': 'amount',
                'product_ids': [products['Kopi Susu'].id],
                'min_quantity': 2,
                'is_multiple': True,
            },
            {
                'name': 'Breakfast Combo',
                'code': 'SARAPAN',
                'discount_type': 'combo',
                'value': Decimal('15'),
                'value_type': 'percent',
                'combo_items': [
                    {'product_id': products['Americano'].id, 'quantity': 1},
                    {'product_id': products['Croissant'].id, 'quantity': 1},
                ],
                'stock': 50,
            },
        ]

        for definition in discounts:
            if not Discount.objects.filter(code=definition['code']).exists():
                create_discount(**definition)
