ORDER_TOPIC = "order-topic"
PAYMENT_TOPIC = "payment-topic"
