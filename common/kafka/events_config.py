# ------------------------------------------
# Notification Events
# ------------------------------------------
EVENT_ORDER_CONFIRMATION        = "OrderConfirmation"        # Order service announces a completed order
EVENT_PAYMENT_CONFIRMATION      = "PaymentConfirmation"      # Payment service announces an accepted payment
