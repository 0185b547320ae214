from decimal import Decimal

from backoffice.db import SessionLocal, init_db
from backoffice.schemas import Address, CustomerIn, ProductIn, SupplierIn
from backoffice.services import directory_service
from backoffice.services.inventory_service import receive_stock
from backoffice.services.state_service import load_state, persist


def seed() -> None:
    init_db()
    with SessionLocal() as db:
        state = load_state(db)

        if not state.suppliers:
            directory_service.add_supplier(
                state,
                SupplierIn(name='Distribuidora Central', cnpj='11222333000181', contact='Marta', email='vendas@central.example'),
            )
        supplier_id = state.suppliers[0].id

        if not state.customers:
            directory_service.add_customer(
                state,
                CustomerIn(
                    name='Mercado Bom Preço',
                    email='compras@bompreco.example',
                    phone='11 4000-1000',
                    address=Address(street='Rua das Flores', number='120', city='São Paulo', state='SP', zip='01000-000'),
                ),
            )

        if not state.products:
            demo_products = [
                ('Café 500g', Decimal('18.90'), Decimal('11.20'), 40),
                ('Açúcar 1kg', Decimal('5.49'), Decimal('3.10'), 60),
                ('Filtro de papel', Decimal('7.25'), Decimal('4.00'), 3),
            ]
            for name, price, cost_price, initial_stock in demo_products:
                product = directory_service.add_product(
                    state,
                    ProductIn(name=name, price=price, cost_price=cost_price, supplier_id=supplier_id),
                )
                receive_stock(
                    state,
                    product_id=product.id,
                    supplier_id=supplier_id,
                    quantity=initial_stock,
                    cost=cost_price * initial_stock,
                )

        persist(db, state)
        db.commit()


if __name__ == '__main__':
    seed()
    print('Seed data inserted/verified.')
