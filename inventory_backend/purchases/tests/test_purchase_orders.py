# purchases/tests/test_purchase_orders.py

from decimal import Decimal

from django.test import TestCase

from core.exceptions import InvalidInputError, InvalidTransitionError, ReferenceNotFoundError
from core.tests.factories import make_product, make_supplier
from products.models import StockLevel, StockMovement
from purchases.models import PurchaseOrder, PurchaseOrderStatus
from purchases.services.order_service import cancel_purchase_order, create_purchase_order
from purchases.services.receiving_service import receive_purchase_order


def stock_of(product):
    return StockLevel.objects.get(product=product).current_stock


class PurchaseOrderTestCase(TestCase):
    def setUp(self):
        self.supplier = make_supplier(name="Century Ply Distributors")
        self.board = make_product(stock=2, purchase_price="1200.00", tax_rate="18.00")
        self.edge = make_product(stock=0, purchase_price="40.00", tax_rate="12.00")
        self.order = create_purchase_order(
            supplier_id=self.supplier.id,
            items=[
                {"product_id": self.board.id, "quantity": 10},
                {"product_id": self.edge.id, "quantity": 100},
            ],
        )
        self.board_line = self.order.items.get(product=self.board)
        self.edge_line = self.order.items.get(product=self.edge)


class CreatePurchaseOrderTests(PurchaseOrderTestCase):
    def test_priced_at_purchase_price_without_touching_stock(self):
        self.assertEqual(self.order.document_number, "PO0001")
        self.assertEqual(self.order.status, PurchaseOrderStatus.PENDING)
        # 12000 + 2160 tax ; 4000 + 480 tax
        self.assertEqual(self.order.subtotal, Decimal("16000.00"))
        self.assertEqual(self.order.tax_amount, Decimal("2640.00"))
        self.assertEqual(self.order.total_amount, Decimal("18640.00"))

        self.assertEqual(stock_of(self.board), Decimal("2"))
        self.assertEqual(stock_of(self.edge), Decimal("0"))

    def test_inactive_supplier(self):
        supplier = make_supplier(is_active=False)

        with self.assertRaises(InvalidInputError):
            create_purchase_order(
                supplier_id=supplier.id, items=[{"product_id": self.board.id, "quantity": 1}]
            )


class ReceivePurchaseOrderTests(PurchaseOrderTestCase):
    def test_receive_everything(self):
        order = receive_purchase_order(order_id=self.order.id)

        self.assertEqual(order.status, PurchaseOrderStatus.RECEIVED)
        self.assertEqual(stock_of(self.board), Decimal("12"))
        self.assertEqual(stock_of(self.edge), Decimal("100"))
        self.assertEqual(
            StockMovement.objects.filter(
                reference_type=StockMovement.ReferenceType.PURCHASE_ORDER, reference_id=self.order.id
            ).count(),
            2,
        )

    def test_partial_receipt_then_rest(self):
        order = receive_purchase_order(
            order_id=self.order.id,
            receipts=[{"item_id": self.board_line.id, "quantity": "4"}],
        )
        self.assertEqual(order.status, PurchaseOrderStatus.PARTIALLY_RECEIVED)
        self.assertEqual(stock_of(self.board), Decimal("6"))

        order = receive_purchase_order(order_id=self.order.id)
        self.assertEqual(order.status, PurchaseOrderStatus.RECEIVED)
        self.assertEqual(stock_of(self.board), Decimal("12"))
        self.assertEqual(stock_of(self.edge), Decimal("100"))

    def test_cannot_receive_more_than_ordered(self):
        with self.assertRaises(InvalidInputError) as ctx:
            receive_purchase_order(
                order_id=self.order.id,
                receipts=[
                    {"item_id": self.board_line.id, "quantity": "6"},
                    {"item_id": self.board_line.id, "quantity": "5"},
                ],
            )

        self.assertEqual(ctx.exception.field, "receipts[1].quantity")
        self.assertEqual(stock_of(self.board), Decimal("2"))

    def test_foreign_line(self):
        other = create_purchase_order(
            supplier_id=self.supplier.id, items=[{"product_id": self.board.id, "quantity": 1}]
        )

        with self.assertRaises(ReferenceNotFoundError):
            receive_purchase_order(
                order_id=self.order.id,
                receipts=[{"item_id": other.items.get().id, "quantity": "1"}],
            )

    def test_received_order_is_closed(self):
        receive_purchase_order(order_id=self.order.id)

        with self.assertRaises(InvalidTransitionError):
            receive_purchase_order(order_id=self.order.id)


class CancelPurchaseOrderTests(PurchaseOrderTestCase):
    def test_cancel_pending(self):
        order = cancel_purchase_order(order_id=self.order.id)

        self.assertEqual(order.status, PurchaseOrderStatus.CANCELLED)
        with self.assertRaises(InvalidTransitionError):
            receive_purchase_order(order_id=self.order.id)

    def test_partially_received_cannot_be_cancelled(self):
        receive_purchase_order(
            order_id=self.order.id, receipts=[{"item_id": self.edge_line.id, "quantity": "1"}]
        )

        with self.assertRaises(InvalidTransitionError):
            cancel_purchase_order(order_id=self.order.id)
        self.assertEqual(
            PurchaseOrder.objects.get(pk=self.order.pk).status,
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
        )
